# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/links.py

"""
Local filesystem implementation of LinkOperations.

Junctions only exist on Windows; elsewhere a junction request is served by
a directory symlink. Removal never follows a link or junction, so the
library behind a target entry is never touched.
"""

import errno
import os
import shutil
import subprocess
from pathlib import Path

import loguru

from linkview.data.models import LinkType

logger = loguru.logger


def _is_link(path: Path) -> bool:
    return path.is_symlink() or os.path.isjunction(path)


class LocalLinkOperations:
    """LinkOperations backed by os/shutil on the local machine."""

    def lexists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def source_exists(self, path: Path) -> bool:
        return Path(path).exists()

    def create_directory_link(self, source: Path, target: Path, link_type: LinkType) -> None:
        self._clear(target)
        if link_type == LinkType.JUNCTION and os.name == "nt":
            self._create_junction(source, target)
        else:
            os.symlink(Path(source).absolute(), target, target_is_directory=True)
        logger.debug(f"Linked directory {target} -> {source} ({link_type})")

    def create_file_link(self, source: Path, target: Path) -> None:
        self._clear(target)
        os.symlink(Path(source).absolute(), target)
        logger.debug(f"Linked file {target} -> {source}")

    def copy_file(self, source: Path, target: Path) -> None:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        # copyfile writes through an existing symlink into the library
        if _is_link(target):
            self.remove(target)
        shutil.copyfile(source, target)
        logger.debug(f"Copied {source} -> {target}")

    def remove(self, path: Path) -> None:
        path = Path(path)
        if os.path.isjunction(path):
            os.rmdir(path)
        elif path.is_symlink():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)

    def _clear(self, target: Path) -> None:
        if os.path.lexists(target):
            self.remove(target)

    def _create_junction(self, source: Path, target: Path) -> None:
        result = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(target), str(Path(source).absolute())],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip()
            code = errno.EACCES if "denied" in message.lower() else errno.EIO
            raise OSError(code, f"mklink /J failed: {message}", str(target))
