# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/naming.py

"""
Target path generation for a single item.

entry-directory targets are named after the item id and can never collide.
entry-file and copy targets are named after the item's sanitized name; a
name already in use gets the first 8 characters of the item id appended.
The suffix comes from the item itself, so the same item always renders to
the same collision name.
"""

import re
from pathlib import Path
from typing import AbstractSet, Union

from linkview.data.models import Item, SyncMode, coerce_mode


# Windows-illegal filename characters
_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')

COLLISION_ID_LENGTH = 8

# names that resolve to the target directory or its parent
_DIRECTORY_REFERENCES = frozenset({".", ".."})


def sanitize_filename(name: str) -> str:
    """Replace every character that is illegal in a filename with '_'."""
    return _ILLEGAL_FILENAME_CHARS.sub('_', name)


def target_path_for(
    item: Item,
    target_dir: Path,
    mode: Union[SyncMode, str],
    names_in_use: AbstractSet[str] = frozenset(),
) -> Path:
    """Derive the target path for one item.

    Args:
        item: Item to name
        target_dir: Directory the entry will live in
        mode: Sync mode selecting the naming rule
        names_in_use: Lower-cased final path components already claimed

    Returns:
        Full target path

    Raises:
        UnsupportedModeError: If mode is not recognized
    """
    mode = coerce_mode(mode)
    target_dir = Path(target_dir)

    if mode == SyncMode.ENTRY_DIRECTORY:
        return target_dir / f"{item.id}.info"

    safe_name = sanitize_filename(item.name)
    base_name = f"{safe_name}.{item.extension}"
    if base_name in _DIRECTORY_REFERENCES:
        safe_name = item.id
        base_name = f"{safe_name}.{item.extension}"
    if base_name.lower() not in names_in_use:
        return target_dir / base_name

    id_part = item.id[:COLLISION_ID_LENGTH].upper()
    return target_dir / f"{safe_name} ({id_part}).{item.extension}"
