# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/commands/info.py

"""
Info command handlers - read-only information commands.

Handles: status, plan, show-index, validate-config
"""

from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from linkview.config.manager import Config, validate_config as collect_config_problems
from linkview.core.lifecycle import index_store_for, preview_plan, run_lock_for
from linkview.system.display import (
    display_config_problems, display_plan, display_view_status, index_to_table
)


def status(
    console: Console,
    config: Config,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Show view settings, index size and last sync time.

    Returns:
        Status result for JSON output
    """
    store = index_store_for(config)
    state = store.load()
    running, holder = run_lock_for(config).is_locked()

    if not quiet:
        display_view_status(console, config, state, store.path, holder=holder)
        if config.view.migrated:
            console.print("[yellow]![/yellow] View config uses legacy keys; they were migrated on load")

    return {
        'operation': 'status',
        'view': config.view.model_dump(mode="json", exclude={"migrated"}),
        'index_path': str(store.path),
        'entries': len(state.index),
        'last_sync_at': state.last_sync_at.isoformat() if state.last_sync_at else None,
        'index_target': str(state.target) if state.target else None,
        'index_mode': state.mode,
        'running': running,
        'lock': holder.to_dict() if holder else None,
    }


def plan(
    console: Console,
    config: Config,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Preview creations and removals without touching the target directory."""
    if not quiet:
        console.print("[dim]Computing plan...[/dim]")

    report = preview_plan(config)

    if not quiet:
        display_plan(console, report.plan, base_path=config.view.target,
                     verbose=verbose, warnings=report.warnings)

    return {**report.summary(), 'operation': 'plan'}


def show_index(
    console: Console,
    config: Config,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """List the entries this view currently owns in the target directory."""
    store = index_store_for(config)
    state = store.load()

    if not quiet:
        if not state.index:
            console.print("Index is empty")
        else:
            console.print(index_to_table(state.index, base_path=state.target or config.view.target))
            console.print(f"{len(state.index)} entries")

    return {
        'operation': 'show-index',
        'index_path': str(store.path),
        'count': len(state.index),
        'index': {item_id: str(path) for item_id, path in state.index.items()},
    }


def validate_config(
    console: Console,
    config_path: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Report configuration problems; exits 1 when any are found."""
    if verbose:
        console.print("[dim]Validating configuration...[/dim]")

    problems = collect_config_problems(config_path)
    if not quiet or problems:
        display_config_problems(console, problems)

    return {
        'operation': 'validate-config',
        'valid': not problems,
        'problems': problems,
        'has_errors': bool(problems),
    }
