# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/lifecycle.py

"""
Sync run orchestration.

One run:
1. take the run lock for the view
2. ensure the target directory exists (fatal if not)
3. load the library catalog and apply the view filter
4. load the previous index
5. compute the plan (stop here for dry runs)
6. execute the plan
7. persist the new index

When the stored index was produced for a different target directory or
mode, its entries are removed first and the view is rebuilt from scratch.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import loguru

from linkview.config.manager import Config
from linkview.core.classifier import remediation_hint
from linkview.core.executor import ExecuteOptions, ensure_target_dir, execute
from linkview.core.planner import compute_plan
from linkview.core.protocols import LinkOperations
from linkview.data.catalog import CatalogItem, LibraryCatalog
from linkview.data.filters import filter_items
from linkview.data.index_store import IndexState, IndexStore
from linkview.data.models import ErrorCategory, SyncIndex, SyncMode, SyncPlan, SyncResult
from linkview.system.locking import RunLock

logger = loguru.logger


@dataclass
class SyncRunReport:
    """Everything a caller needs to report on one run."""
    view_name: str
    mode: SyncMode
    target: Path
    desired_count: int
    plan: SyncPlan
    result: Optional[SyncResult] = None
    dry_run: bool = False
    retired: Optional[SyncResult] = None
    index_path: Optional[Path] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        errors = self.result.has_errors if self.result else False
        return errors or bool(self.retired and self.retired.has_errors)

    def error_categories(self) -> dict[str, int]:
        counts = {category.value: 0 for category in ErrorCategory}
        for result in (self.retired, self.result):
            if result is None:
                continue
            for category in ErrorCategory:
                counts[category.value] += len(result.errors_in(category))
        return counts

    def remediation_hints(self) -> list[str]:
        hints = []
        for category, count in self.error_categories().items():
            if not count:
                continue
            hint = remediation_hint(ErrorCategory(category), self.mode)
            if hint:
                hints.append(hint)
        return hints

    def summary(self) -> dict[str, object]:
        """Generate a summary for JSON output."""
        return {
            'operation': 'sync',
            'view': self.view_name,
            'mode': self.mode.value,
            'target': str(self.target),
            'dry_run': self.dry_run,
            'desired_count': self.desired_count,
            'plan': self.plan.summary(),
            'result': self.result.summary() if self.result else None,
            'retired': self.retired.summary() if self.retired else None,
            'error_categories': self.error_categories(),
            'index_path': str(self.index_path) if self.index_path else None,
            'warnings': self.warnings,
        }


def index_store_for(config: Config) -> IndexStore:
    return IndexStore(config.user.state_dir, config.view.library, config.view.name)


def run_lock_for(config: Config, operation: str = "sync", timeout_seconds: float = 0.0) -> RunLock:
    store = index_store_for(config)
    return RunLock(store.path.with_suffix(".lock"), operation=operation, timeout_seconds=timeout_seconds)


def load_desired_items(config: Config) -> list[CatalogItem]:
    """Catalog items of the view's library that pass the view filter."""
    catalog_items = LibraryCatalog(config.view.library).load()
    desired = filter_items(catalog_items, config.view.filter)
    logger.debug(f"{len(desired)} of {len(catalog_items)} items pass the filter of view '{config.view.name}'")
    return desired


def _settings_changed(state: IndexState, config: Config) -> bool:
    if not state.index or state.target is None:
        return False
    return (
        Path(state.target) != Path(config.view.target)
        or (state.mode is not None and state.mode != config.view.mode.value)
    )


def _retire_previous_view(state: IndexState, options: ExecuteOptions,
                          ops: Optional[LinkOperations]) -> SyncResult:
    """Remove every entry of an index produced under other settings."""
    logger.info(
        f"View settings changed (was {state.mode} in {state.target}); "
        f"removing {len(state.index)} previous entries"
    )
    mode = state.mode or SyncMode.ENTRY_FILE.value
    retire_plan = compute_plan([], state.index, mode, state.target)
    return execute(retire_plan, mode, state.index, replace(options, target_dir=state.target), ops)


def preview_plan(config: Config) -> SyncRunReport:
    """Compute the plan for the view without touching the filesystem."""
    view = config.view
    desired = [item.to_item() for item in load_desired_items(config)]
    state = index_store_for(config).load()

    warnings = []
    previous_index: SyncIndex = state.index
    if _settings_changed(state, config):
        warnings.append(
            f"Target or mode changed since last sync; {len(state.index)} previous entries "
            f"in {state.target} will be removed"
        )
        previous_index = {}

    plan = compute_plan(desired, previous_index, view.mode, view.target)
    return SyncRunReport(
        view_name=view.name,
        mode=view.mode,
        target=view.target,
        desired_count=len(desired),
        plan=plan,
        dry_run=True,
        warnings=warnings,
    )


def run_sync(config: Config, dry_run: bool = False,
             ops: Optional[LinkOperations] = None) -> SyncRunReport:
    """
    Run one sync of the configured view.

    Args:
        config: Loaded configuration
        dry_run: If True, compute and return the plan without executing it
        ops: Filesystem primitives (default: local links)

    Returns:
        SyncRunReport; per-item failures are in report.result.errors

    Raises:
        LockConflictError: If another run of this view is in progress
        TargetDirUnavailableError: If the target directory cannot be created
        CatalogError, IndexStoreError, ConfigError: Run-level failures
    """
    if dry_run:
        return preview_plan(config)

    view = config.view
    store = index_store_for(config)
    logger.debug(f"Starting sync of view '{view.name}' ({view.mode}) into {view.target}")

    with run_lock_for(config):
        ensure_target_dir(view.target)

        desired = [item.to_item() for item in load_desired_items(config)]
        state = store.load()
        options = ExecuteOptions(
            library_path=view.library, link_type=view.link_type, target_dir=view.target
        )

        retired = None
        previous_index: SyncIndex = state.index
        if _settings_changed(state, config):
            retired = _retire_previous_view(state, options, ops)
            # entries whose removal failed are dropped too; see DESIGN.md
            previous_index = {}

        plan = compute_plan(desired, previous_index, view.mode, view.target)
        result = execute(plan, view.mode, previous_index, options, ops)
        store.record_sync(result.new_index, view.target, view.mode.value)

    if result.has_errors:
        logger.warning(f"Sync of view '{view.name}' finished with {len(result.errors)} error(s)")
    else:
        logger.info(f"Sync of view '{view.name}' complete: {len(result.new_index)} entries")

    return SyncRunReport(
        view_name=view.name,
        mode=view.mode,
        target=view.target,
        desired_count=len(desired),
        plan=plan,
        result=result,
        retired=retired,
        index_path=store.path,
    )


# done.
