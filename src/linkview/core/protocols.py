# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/protocols.py

"""
Protocol for the platform primitives the plan executor relies on.

Any object implementing these methods can be handed to execute(), which
keeps the executor testable without touching real links.
"""

from pathlib import Path
from typing import Protocol

from linkview.data.models import LinkType


class LinkOperations(Protocol):
    """Create and remove target entries.

    Creation primitives must overwrite whatever exists at the target path.
    Removal must succeed silently if nothing exists at the path.
    """

    def lexists(self, path: Path) -> bool:
        """True if anything exists at path, including a broken link."""
        ...

    def source_exists(self, path: Path) -> bool:
        """True if the source file exists (links followed)."""
        ...

    def create_directory_link(self, source: Path, target: Path, link_type: LinkType) -> None:
        """Link target to the source directory, replacing any existing entry."""
        ...

    def create_file_link(self, source: Path, target: Path) -> None:
        """Link target to the source file, replacing any existing entry."""
        ...

    def copy_file(self, source: Path, target: Path) -> None:
        """Byte-copy source to target, creating the parent directory."""
        ...

    def remove(self, path: Path) -> None:
        """Remove the entry at path; links are removed, never followed."""
        ...
