# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/system/display.py

# Standard library imports
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

# Third-party imports
import humanize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Local imports
from linkview.config.manager import Config
from linkview.data.index_store import IndexState
from linkview.data.models import SyncErrorRecord, SyncIndex, SyncPlan, SyncResult
from linkview.system.locking import LockInfo


def _display_path(path: Path, base_path: Optional[Path]) -> str:
    if base_path is not None:
        try:
            return str(Path(path).relative_to(base_path))
        except ValueError:
            pass
    return str(path)


def format_last_sync(last_sync_at: Optional[datetime]) -> str:
    """Relative time of the last run, e.g. '3 minutes ago'."""
    if last_sync_at is None:
        return "never"
    when = datetime.now(UTC) if last_sync_at.tzinfo else datetime.now()
    return humanize.naturaltime(last_sync_at, when=when)


def plan_to_table(plan: SyncPlan, base_path: Optional[Path] = None, verbose: bool = False) -> Table:
    """Convert a sync plan to a rich Table for display.

    Args:
        plan: The plan to show
        base_path: Base path to strip from target paths
        verbose: Whether to include the source path of each creation

    Returns:
        Rich Table object ready for display
    """
    table = Table()
    table.add_column("Action")
    table.add_column("Target")
    table.add_column("Item")
    if verbose:
        table.add_column("Source")

    for target_path in plan.to_remove:
        row = ["[red]remove[/red]", _display_path(target_path, base_path), ""]
        if verbose:
            row.append("")
        table.add_row(*row)

    for creation in plan.to_create:
        row = ["[green]create[/green]", _display_path(creation.target_path, base_path), creation.item.id]
        if verbose:
            row.append(str(creation.item.source_path))
        table.add_row(*row)

    return table


def index_to_table(index: SyncIndex, base_path: Optional[Path] = None) -> Table:
    """Convert a sync index to a rich Table, sorted by target path."""
    table = Table()
    table.add_column("Item")
    table.add_column("Target")
    for item_id, target_path in sorted(index.items(), key=lambda kv: str(kv[1]).casefold()):
        table.add_row(item_id, _display_path(target_path, base_path))
    return table


def errors_to_table(errors: list[SyncErrorRecord]) -> Table:
    table = Table(title="Errors")
    table.add_column("Category")
    table.add_column("Item")
    table.add_column("Path")
    table.add_column("Error")
    for record in errors:
        table.add_row(
            record.category.value,
            record.item.id if record.item else "",
            str(record.path) if record.path else "",
            str(record.error),
        )
    return table


def display_view_status(console: Console, config: Config, state: IndexState, index_path: Path,
                        holder: Optional[LockInfo] = None) -> None:
    """Show view settings and index state."""
    view = config.view
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("View", view.name)
    table.add_row("Library", str(view.library))
    table.add_row("Target", str(view.target))
    table.add_row("Mode", view.mode.value)
    table.add_row("Link type", view.link_type.value)
    table.add_row("Active", "yes" if view.active else "no")
    table.add_row("Interval", humanize.naturaldelta(view.sync_interval))
    table.add_row("Entries", str(len(state.index)))
    table.add_row("Last sync", format_last_sync(state.last_sync_at))
    table.add_row("Index file", str(index_path))
    if holder is not None:
        table.add_row(
            "Running", f"{holder.operation} (pid {holder.pid} on {holder.hostname}, since {holder.timestamp})"
        )
    console.print(table)


def display_plan(console: Console, plan: SyncPlan, base_path: Optional[Path] = None,
                 verbose: bool = False, warnings: Optional[list[str]] = None) -> None:
    for warning in warnings or []:
        console.print(f"[yellow]![/yellow] {warning}")

    if plan.is_empty():
        console.print("[green]✓[/green] Target directory is up to date")
        return

    console.print(plan_to_table(plan, base_path, verbose=verbose))
    console.print(f"{len(plan.to_create)} to create, {len(plan.to_remove)} to remove")


def display_sync_result(console: Console, result: SyncResult, hints: Optional[list[str]] = None,
                        verbose: bool = False) -> None:
    """Display the outcome of one run."""
    console.print(
        f"Created {result.created}, removed {result.removed}, skipped {result.skipped}; "
        f"{len(result.new_index)} entries in view"
    )

    if verbose and result.skipped_items:
        for skipped in result.skipped_items:
            console.print(f"  [dim]skipped {skipped.item.id} ({skipped.reason})[/dim]")

    if not result.errors:
        console.print("[green]✓[/green] Sync complete")
        return

    console.print(errors_to_table(result.errors))
    for hint in hints or []:
        console.print(Panel(hint, title="Permission denied", border_style="yellow"))
    console.print(f"[red]✗[/red] {len(result.errors)} item(s) failed")


def display_config_problems(console: Console, problems: list[str]) -> None:
    if not problems:
        console.print("[green]✓[/green] Configuration is valid")
        return
    console.print("[red]✗[/red] Configuration problems found:")
    for problem in problems:
        console.print(f"  - {problem}")
