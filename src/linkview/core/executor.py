# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/executor.py

"""
Plan execution.

Applies a SyncPlan through mode-specific primitives: removals first, then
index repair, then creations. A failing item never aborts the run; every
failure lands in SyncResult.errors and the item is simply absent from the
new index. There is no rollback.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import loguru

from linkview.core.classifier import classify
from linkview.core.links import LocalLinkOperations
from linkview.core.protocols import LinkOperations
from linkview.data.models import (
    ErrorCategory, Item, LinkType, PlannedCreation, SkippedItem, SyncErrorRecord,
    SyncIndex, SyncMode, SyncPlan, SyncResult, coerce_mode, normalize_index
)
from linkview.system.exceptions import (
    ConfigError, OperationFailedError, PermissionDeniedError, SourceMissingError,
    TargetDirUnavailableError
)

logger = loguru.logger

MISSING_FILE = "missing-file"


@dataclass(frozen=True)
class ExecuteOptions:
    """Mode-specific parameters for execute()."""
    library_path: Optional[Path] = None  # required for entry-directory
    link_type: LinkType = LinkType.JUNCTION
    target_dir: Optional[Path] = None  # entries outside it are never touched


def ensure_target_dir(target_dir: Union[str, Path]) -> Path:
    """Create the target directory if it is absent.

    Raises:
        TargetDirUnavailableError: If it cannot be created or is not a directory
    """
    target_dir = Path(target_dir)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TargetDirUnavailableError(
            f"Failed to create target directory: {target_dir} ({e})", path=str(target_dir)
        ) from e
    if not target_dir.is_dir():
        raise TargetDirUnavailableError(
            f"Target path is not a directory: {target_dir}", path=str(target_dir)
        )
    return target_dir


def entry_source_dir(library_path: Path, item_id: str) -> Path:
    """Per-item storage location inside the library."""
    return Path(library_path) / "images" / f"{item_id}.info"


def _inside_target_dir(path: Path, target_dir: Path) -> bool:
    # lexical only; must not follow the entry link
    entry = Path(os.path.normpath(os.path.abspath(path)))
    root = Path(os.path.normpath(os.path.abspath(target_dir)))
    return entry != root and entry.is_relative_to(root)


def _check_entry_path(path: Path, options: ExecuteOptions) -> None:
    if options.target_dir is not None and not _inside_target_dir(path, options.target_dir):
        raise OperationFailedError(
            f"Refusing to touch {path}: not inside target directory {options.target_dir}",
            path=str(path),
        )


def _error_record(error: Exception, item: Optional[Item] = None, path: Optional[Path] = None) -> SyncErrorRecord:
    category = classify(error)
    error_cls = PermissionDeniedError if category == ErrorCategory.PERMISSION_DENIED else OperationFailedError
    wrapped = error_cls(
        str(error),
        item_id=item.id if item else None,
        path=str(path) if path else None,
    )
    wrapped.__cause__ = error
    return SyncErrorRecord(error=wrapped, category=category, item=item, path=path)


# ---- Creation primitives per mode ----

def _require_source(creation: PlannedCreation, ops: LinkOperations) -> Path:
    source = Path(creation.item.source_path)
    if not ops.source_exists(source):
        raise SourceMissingError(
            f"Source file not found: {source}",
            item_id=creation.item.id,
            path=str(source),
        )
    return source


def _create_entry_directory(creation: PlannedCreation, options: ExecuteOptions, ops: LinkOperations) -> None:
    source = entry_source_dir(options.library_path, creation.item.id)
    ops.create_directory_link(source, creation.target_path, options.link_type)


def _create_entry_file(creation: PlannedCreation, options: ExecuteOptions, ops: LinkOperations) -> None:
    source = _require_source(creation, ops)
    ops.create_file_link(source, creation.target_path)


def _create_copy(creation: PlannedCreation, options: ExecuteOptions, ops: LinkOperations) -> None:
    source = _require_source(creation, ops)
    ops.copy_file(source, creation.target_path)


_CREATORS: dict[SyncMode, Callable[[PlannedCreation, ExecuteOptions, LinkOperations], None]] = {
    SyncMode.ENTRY_DIRECTORY: _create_entry_directory,
    SyncMode.ENTRY_FILE: _create_entry_file,
    SyncMode.COPY: _create_copy,
}


# ---- Execution steps ----

def _execute_removals(to_remove: list[Path], options: ExecuteOptions, ops: LinkOperations,
                      result: SyncResult) -> None:
    for target_path in to_remove:
        try:
            _check_entry_path(target_path, options)
            # lexists so broken links are still found
            if not ops.lexists(target_path):
                logger.debug(f"Already absent, nothing to remove: {target_path}")
                continue
            ops.remove(target_path)
            result.removed += 1
            logger.debug(f"Removed {target_path}")
        except Exception as e:
            logger.warning(f"Failed to remove {target_path}: {e}")
            result.errors.append(_error_record(e, path=target_path))


def _repair_index(index: SyncIndex, removed_paths: list[Path]) -> None:
    """Drop index entries pointing at removed paths (index is keyed by id, so scan by value)."""
    removed = set(removed_paths)
    for item_id in [item_id for item_id, path in index.items() if path in removed]:
        del index[item_id]


def _execute_creations(
    to_create: list[PlannedCreation],
    mode: SyncMode,
    options: ExecuteOptions,
    ops: LinkOperations,
    result: SyncResult,
) -> None:
    create = _CREATORS[mode]
    for creation in to_create:
        item = creation.item
        try:
            _check_entry_path(creation.target_path, options)
            create(creation, options, ops)
        except SourceMissingError as e:
            logger.info(f"Skipping {item.id}: {e}")
            result.skipped += 1
            result.skipped_items.append(SkippedItem(item=item, reason=MISSING_FILE, error=e))
            continue
        except Exception as e:
            logger.warning(f"Failed to create {creation.target_path} for {item.id}: {e}")
            result.errors.append(_error_record(e, item=item, path=creation.target_path))
            continue
        result.created += 1
        result.new_index[item.id] = creation.target_path


def execute(
    plan: SyncPlan,
    mode: Union[SyncMode, str],
    previous_index: Mapping[str, Union[str, Path]],
    options: Optional[ExecuteOptions] = None,
    ops: Optional[LinkOperations] = None,
) -> SyncResult:
    """Apply a sync plan.

    Args:
        plan: Plan from compute_plan()
        mode: Sync mode the plan was computed for
        previous_index: Index the plan was computed against (not modified)
        options: Library path, link type and the target directory entries must live in
        ops: Filesystem primitives; defaults to LocalLinkOperations

    Returns:
        SyncResult with counts, errors and the new index

    Raises:
        UnsupportedModeError: If mode is not recognized
        ConfigError: If entry-directory mode is used without a library path
    """
    mode = coerce_mode(mode)
    options = options or ExecuteOptions()
    ops = ops or LocalLinkOperations()

    if mode == SyncMode.ENTRY_DIRECTORY and options.library_path is None:
        raise ConfigError("entry-directory mode requires a library path")

    result = SyncResult(
        skipped=len(plan.skipped),
        new_index=normalize_index(previous_index),
        skipped_items=list(plan.skipped),
    )

    _execute_removals(plan.to_remove, options, ops, result)
    _repair_index(result.new_index, plan.to_remove)
    _execute_creations(plan.to_create, mode, options, ops, result)

    logger.info(
        f"Executed {mode} plan: created={result.created} removed={result.removed} "
        f"skipped={result.skipped} errors={len(result.errors)}"
    )
    return result
