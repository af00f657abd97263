# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/data/models.py

"""
Shared data types for the reconciliation engine.

Item is read-only input; SyncIndex is the only state carried between runs;
SyncPlan is transient; SyncResult is produced once per run.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from linkview.system.exceptions import UnsupportedModeError


class SyncMode(str, Enum):
    ENTRY_DIRECTORY = "entry-directory"
    ENTRY_FILE = "entry-file"
    COPY = "copy"

    def __str__(self) -> str:
        return self.value


class LinkType(str, Enum):
    """Directory link flavour for entry-directory mode."""
    JUNCTION = "junction"
    SYMBOLIC_DIRECTORY_LINK = "symbolic-directory-link"

    def __str__(self) -> str:
        return self.value


class ErrorCategory(str, Enum):
    PERMISSION_DENIED = "permission-denied"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


# item id -> target path currently occupied by that item
SyncIndex = dict[str, Path]


def coerce_mode(mode: Union[SyncMode, str]) -> SyncMode:
    """Return mode as a SyncMode, raising UnsupportedModeError for anything else."""
    if isinstance(mode, SyncMode):
        return mode
    try:
        return SyncMode(mode)
    except ValueError:
        raise UnsupportedModeError(mode) from None


def normalize_index(index: Optional[Mapping[str, Union[str, Path]]]) -> SyncIndex:
    """Copy an index, converting string paths to Path."""
    if not index:
        return {}
    return {item_id: Path(path) for item_id, path in index.items()}


@dataclass(frozen=True)
class Item:
    """One library item as seen by the engine. Identity is `id`."""
    id: str
    name: str
    extension: str
    source_path: Path


@dataclass(frozen=True)
class PlannedCreation:
    item: Item
    target_path: Path


@dataclass(frozen=True)
class SkippedItem:
    item: Item
    reason: str  # "missing-file"
    error: Optional[Exception] = None


@dataclass
class SyncPlan:
    """Creations, removals and skips for one run. Never persisted."""
    to_create: list[PlannedCreation] = field(default_factory=list)
    to_remove: list[Path] = field(default_factory=list)
    skipped: list[SkippedItem] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.to_create and not self.to_remove

    def summary(self) -> dict[str, object]:
        return {
            'to_create_count': len(self.to_create),
            'to_remove_count': len(self.to_remove),
            'to_create': [
                {'item_id': c.item.id, 'target_path': str(c.target_path)}
                for c in self.to_create
            ],
            'to_remove': [str(p) for p in self.to_remove],
        }


@dataclass(frozen=True)
class SyncErrorRecord:
    """A per-item or per-path failure. At least one of item/path is set."""
    error: Exception
    category: ErrorCategory
    item: Optional[Item] = None
    path: Optional[Path] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            'item_id': self.item.id if self.item else None,
            'path': str(self.path) if self.path else None,
            'error': str(self.error),
            'error_type': type(self.error).__name__,
            'category': self.category.value,
        }


@dataclass
class SyncResult:
    """Outcome of executing a SyncPlan. The caller persists new_index."""
    created: int = 0
    removed: int = 0
    skipped: int = 0
    new_index: SyncIndex = field(default_factory=dict)
    errors: list[SyncErrorRecord] = field(default_factory=list)
    skipped_items: list[SkippedItem] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def errors_in(self, category: ErrorCategory) -> list[SyncErrorRecord]:
        return [e for e in self.errors if e.category == category]

    def summary(self) -> dict[str, object]:
        """Generate a summary for JSON output."""
        return {
            'created': self.created,
            'removed': self.removed,
            'skipped': self.skipped,
            'total': len(self.new_index),
            'errors_count': len(self.errors),
            'errors': [e.to_dict() for e in self.errors],
            'skipped_items': [
                {'item_id': s.item.id, 'reason': s.reason} for s in self.skipped_items
            ],
        }
