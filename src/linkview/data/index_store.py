# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/data/index_store.py

"""
Durable storage for the sync index.

The index is the engine's only memory of what it produced; losing it forces
a full resync and can leave stale entries in the target directory. Writes
therefore go through a temp file and an atomic rename, and a corrupt file
is an error rather than an empty index.

One file per (view, library) pair:

    <state_dir>/<view-name>-<xxh64 of resolved library path>.json
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

import loguru
import orjson
import xxhash

from linkview.data.models import SyncIndex, normalize_index
from linkview.system.exceptions import IndexStoreError

logger = loguru.logger

FORMAT_VERSION = 1


@dataclass
class IndexState:
    """Persisted index plus the settings it was produced under."""
    index: SyncIndex = field(default_factory=dict)
    target: Optional[Path] = None
    mode: Optional[str] = None
    last_sync_at: Optional[datetime] = None

    def to_dict(self, library_path: Path) -> dict[str, object]:
        return {
            "version": FORMAT_VERSION,
            "library": str(library_path),
            "target": str(self.target) if self.target else None,
            "mode": self.mode,
            "last_sync_at": self.last_sync_at.isoformat() if self.last_sync_at else None,
            "index": {item_id: str(path) for item_id, path in self.index.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IndexState":
        last_sync_at = data.get("last_sync_at")
        target = data.get("target")
        return cls(
            index=normalize_index(data.get("index") or {}),
            target=Path(target) if target else None,
            mode=data.get("mode"),
            last_sync_at=datetime.fromisoformat(last_sync_at) if last_sync_at else None,
        )


def library_key(library_path: Path) -> str:
    """Stable key for one library instance on this machine."""
    resolved = str(Path(library_path).expanduser().resolve())
    return xxhash.xxh64(resolved.encode("utf-8")).hexdigest()


class IndexStore:
    """Load and save the IndexState of one view."""

    def __init__(self, state_dir: Path, library_path: Path, view_name: str = "default"):
        self.state_dir = Path(state_dir)
        self.library_path = Path(library_path)
        self.view_name = view_name

    @property
    def path(self) -> Path:
        return self.state_dir / f"{self.view_name}-{library_key(self.library_path)}.json"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> IndexState:
        """Load the stored state; a missing file is an empty index.

        Raises:
            IndexStoreError: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.debug(f"No index at {self.path}, starting empty")
            return IndexState()

        try:
            data = orjson.loads(self.path.read_bytes())
            state = IndexState.from_dict(data)
        except (OSError, orjson.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
            raise IndexStoreError(
                f"Cannot read sync index {self.path}: {e}. "
                "Remove the file to force a full resync.",
                path=str(self.path),
            ) from e

        logger.debug(f"Loaded index with {len(state.index)} entries from {self.path}")
        return state

    def save(self, state: IndexState) -> Path:
        """Write the state atomically (temp file + rename).

        Raises:
            IndexStoreError: If the file cannot be written
        """
        final_path = self.path
        temp_path = final_path.with_suffix(final_path.suffix + ".pending")
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(orjson.dumps(state.to_dict(self.library_path), option=orjson.OPT_INDENT_2))
            temp_path.replace(final_path)
        except OSError as e:
            raise IndexStoreError(f"Cannot write sync index {final_path}: {e}", path=str(final_path)) from e

        logger.debug(f"Saved index with {len(state.index)} entries to {final_path}")
        return final_path

    def record_sync(self, index: SyncIndex, target: Path, mode: str) -> IndexState:
        """Persist the index produced by a run, stamped with the current time."""
        state = IndexState(
            index=dict(index),
            target=Path(target),
            mode=str(mode),
            last_sync_at=datetime.now(UTC),
        )
        self.save(state)
        return state
