# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/commands/actions.py

"""
Action command handlers - state-changing commands.

Handles: sync, watch
"""

from typing import Any, Optional

import typer
from rich.console import Console

from linkview.config.manager import Config
from linkview.core.lifecycle import SyncRunReport, preview_plan, run_sync
from linkview.core.scheduler import SyncScheduler
from linkview.system.display import display_plan, display_sync_result


def _display_report(console: Console, report: SyncRunReport, verbose: bool, quiet: bool) -> None:
    if report.retired is not None and not quiet:
        console.print(
            f"[yellow]![/yellow] View settings changed: removed {report.retired.removed} "
            f"previous entries"
        )
    if report.result is None:
        return
    # errors are shown even in quiet mode
    if quiet and not report.has_errors:
        return
    display_sync_result(console, report.result, hints=report.remediation_hints(), verbose=verbose)


def sync(
    console: Console,
    config: Config,
    verbose: bool = False,
    quiet: bool = False,
    dry_run: bool = False
) -> dict[str, Any]:
    """Run one sync of the view.

    Args:
        console: Rich console for output
        config: Loaded configuration
        verbose: Show skipped items and source paths
        quiet: Only report failures
        dry_run: Show the plan without making changes

    Returns:
        Run summary for JSON output; 'has_errors' makes the command exit 1
    """
    if dry_run:
        report = preview_plan(config)
        if not quiet:
            display_plan(console, report.plan, base_path=config.view.target,
                         verbose=verbose, warnings=report.warnings)
        return {**report.summary(), 'has_errors': False}

    if not quiet:
        console.print(f"[dim]Syncing view '{config.view.name}' into {config.view.target}...[/dim]")

    report = run_sync(config)
    _display_report(console, report, verbose, quiet)
    return {**report.summary(), 'has_errors': report.has_errors}


def watch(
    console: Console,
    config: Config,
    verbose: bool = False,
    quiet: bool = False,
    max_runs: Optional[int] = None,
    force: bool = False
) -> dict[str, Any]:
    """Sync the view every sync_interval seconds until interrupted."""
    if not config.view.active and not force:
        console.print(f"[red]✗[/red] View '{config.view.name}' is not active")
        console.print("Set 'active: true' in the view config, or pass --force")
        raise typer.Exit(1)

    def run_and_report(cfg: Config) -> SyncRunReport:
        report = run_sync(cfg)
        _display_report(console, report, verbose, quiet)
        return report

    scheduler = SyncScheduler(config, runner=run_and_report, force=force)
    if not quiet:
        console.print(
            f"Watching view '{config.view.name}' every {config.view.sync_interval}s "
            "(Ctrl-C to stop)"
        )
    ticks = scheduler.run_forever(max_runs=max_runs)

    return {
        'operation': 'watch',
        'ticks': ticks,
        'runs': scheduler.runs,
        'failures': scheduler.failures,
        'last_run': scheduler.last_report.summary() if scheduler.last_report else None,
    }
