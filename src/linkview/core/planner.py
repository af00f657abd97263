# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/planner.py

"""
Sync plan computation.

Compares the desired item set against the previous index and decides which
entries to create and which to remove. Pure: no filesystem access, safe to
call repeatedly for previews.
"""

from pathlib import Path
from typing import AbstractSet, Iterable, Iterator, Mapping, Sequence, Union

import loguru

from linkview.core.naming import target_path_for
from linkview.data.models import (
    Item, PlannedCreation, SyncMode, SyncPlan, coerce_mode, normalize_index
)

logger = loguru.logger


def reserved_names(previous_index: Mapping[str, Path], desired_ids: AbstractSet[str]) -> frozenset[str]:
    """Names held by entries that stay unchanged this run.

    Entries about to be removed do not reserve their name, so a newly desired
    item may reuse it.
    """
    return frozenset(
        Path(path).name.lower()
        for item_id, path in previous_index.items()
        if item_id in desired_ids
    )


def assign_target_paths(
    new_items: Iterable[Item],
    target_dir: Path,
    mode: SyncMode,
    reserved: AbstractSet[str],
) -> Iterator[PlannedCreation]:
    """Yield a planned creation for each item, in order.

    Each yielded name is claimed before the next item is named, so the first
    item to render a bare name keeps it and later ones get the id suffix.
    The claimed-name set is private to this iterator.
    """
    claimed = set(reserved)
    for item in new_items:
        target_path = target_path_for(item, target_dir, mode, claimed)
        claimed.add(target_path.name.lower())
        yield PlannedCreation(item=item, target_path=target_path)


def compute_plan(
    desired_items: Sequence[Item],
    previous_index: Mapping[str, Union[str, Path]],
    mode: Union[SyncMode, str],
    target_dir: Union[str, Path],
) -> SyncPlan:
    """Compute the sync plan for one run.

    Args:
        desired_items: Items that should be present, in caller order
        previous_index: Index produced by the previous run
        mode: Sync mode
        target_dir: Target directory

    Returns:
        SyncPlan with creations in desired order and removals in index order

    Raises:
        UnsupportedModeError: If mode is not recognized
    """
    mode = coerce_mode(mode)
    target_dir = Path(target_dir)
    index = normalize_index(previous_index)

    indexed_ids = set(index)
    desired_ids = {item.id for item in desired_items}

    # first occurrence wins if the caller passes the same id twice
    seen: set[str] = set()
    new_items = []
    for item in desired_items:
        if item.id in indexed_ids or item.id in seen:
            continue
        seen.add(item.id)
        new_items.append(item)

    to_create = list(assign_target_paths(
        new_items, target_dir, mode, reserved_names(index, desired_ids)
    ))
    to_remove = [path for item_id, path in index.items() if item_id not in desired_ids]

    logger.debug(
        f"Computed {mode} plan for {target_dir}: {len(to_create)} to create, "
        f"{len(to_remove)} to remove, {len(index) - len(to_remove)} unchanged"
    )
    return SyncPlan(to_create=to_create, to_remove=to_remove)
