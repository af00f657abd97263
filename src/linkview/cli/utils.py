# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/utils.py

"""
CLI utility functions for common patterns across linkview commands.

All functions handle console output and typer exits consistently.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from linkview.config.manager import Config, VIEW_CFG
from linkview.system.exceptions import LinkViewError


def load_config_with_console(console: Console, config_path: Optional[Path] = None,
                             verbose: bool = False) -> Config:
    """
    Load linkview configuration with proper error handling and console output.

    Args:
        console: Rich console for output
        config_path: Explicit view config file, searched for when None
        verbose: Show loading message if True

    Returns:
        Loaded configuration object

    Raises:
        typer.Exit: If configuration loading fails
    """
    if verbose:
        console.print("[dim]Loading configuration...[/dim]")

    try:
        return Config.load(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print(f"Run this command from a directory containing {VIEW_CFG}, or pass --config")
        raise typer.Exit(1)
    except LinkViewError as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]✗[/red] Unexpected error loading configuration: {e}")
        raise typer.Exit(1)


def handle_operation_error(console: Console, operation: str, error: Exception) -> None:
    """Handle operation errors with consistent formatting."""
    console.print(f"[red]✗[/red] Error {operation}: {error}")
    raise typer.Exit(1)
