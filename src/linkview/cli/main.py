# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/main.py

"""
CLI dispatcher routing commands to handlers through the patterns in
linkview.cli.patterns:
- info_command_pattern: status, plan, show-index
- discovery_command_pattern: validate-config
- operation_command_pattern: sync, watch
"""

# Standard library imports
from importlib.metadata import version
from pathlib import Path
from typing import Any, Optional

# Third-party imports
import typer
from rich.console import Console

# Local imports
from linkview.cli.commands import actions as action_commands
from linkview.cli.commands import info as info_commands
from linkview.cli.patterns import (
    discovery_command_pattern,
    info_command_pattern,
    operation_command_pattern,
)
from linkview.cli.utils import handle_operation_error
from linkview.system.logging_setup import setup_logging

app = typer.Typer(
    help="""linkview - Keep a directory of links congruent with a filtered library view

[bold green]Core Operations:[/bold green] status, plan, sync, watch
[bold magenta]Inspection:[/bold magenta] show-index
[bold red]Validation:[/bold red] validate-config
""",
    rich_markup_mode="rich"
)

console = Console()

CONFIG_HELP = "View config file (default: nearest .linkview.yml)"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            pkg_version = version("linkview")
        except Exception as e:
            handle_operation_error(console, "retrieving version", e)
        console.print(f"linkview version {pkg_version}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """linkview - Filtered library views as directories of links."""
    ctx.obj = {"debug": debug}


def _setup_command_logging(ctx: typer.Context, config_path: Optional[Path]) -> None:
    # the view name for the log file is only known once --config is parsed
    debug = bool(ctx.obj and ctx.obj.get("debug"))
    setup_logging(debug=debug, config_path=config_path)


# =============================================================================
# INFO COMMANDS - Read-only information about the view
# =============================================================================

@app.command()
def status(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold green]Core Operations[/bold green]: Show view settings, index size and last sync time."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = info_command_pattern(info_commands.status)
    return decorated_handler(config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json)


@app.command()
def plan(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show source paths"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold green]Core Operations[/bold green]: Preview creations and removals."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = info_command_pattern(info_commands.plan)
    return decorated_handler(config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json)


@app.command(name="show-index")
def show_index_command(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold magenta]Inspection[/bold magenta]: List the entries the view owns in the target directory."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = info_command_pattern(info_commands.show_index)
    return decorated_handler(config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json)


# =============================================================================
# VALIDATION COMMANDS
# =============================================================================

@app.command(name="validate-config")
def validate_config_command(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report problems"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold red]Validation[/bold red]: Check the view and user configuration."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = discovery_command_pattern(info_commands.validate_config)
    return decorated_handler(config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json)


# =============================================================================
# OPERATION COMMANDS - Change the target directory
# =============================================================================

@app.command()
def sync(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change without changing it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show skipped items"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report failures"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold green]Core Operations[/bold green]: Bring the target directory in line with the view."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = operation_command_pattern(action_commands.sync)
    return decorated_handler(
        config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json, dry_run=dry_run
    )


@app.command()
def watch(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    max_runs: Optional[int] = typer.Option(None, "--max-runs", min=1, help="Stop after this many runs"),
    force: bool = typer.Option(False, "--force", help="Run even if the view is not active"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show skipped items"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report failures"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON")
) -> Any:
    """[bold green]Core Operations[/bold green]: Sync every sync_interval seconds."""
    _setup_command_logging(ctx, config_path)
    decorated_handler = operation_command_pattern(action_commands.watch)
    return decorated_handler(
        config_path=config_path, verbose=verbose, quiet=quiet, to_json=to_json,
        max_runs=max_runs, force=force
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def main() -> None:  # pragma: no cover - entry point
    """Entry point for the linkview CLI application."""
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
