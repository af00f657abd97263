# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/classifier.py

"""
Classify filesystem errors into permission-denied vs. other.

The engine records the category next to each error but never changes
behaviour because of it; callers use it to pick a remediation message.
"""

import errno
from typing import Optional

from linkview.data.models import ErrorCategory, SyncMode
from linkview.system.exceptions import PermissionDeniedError


_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM})

# ERROR_ACCESS_DENIED, ERROR_PRIVILEGE_NOT_HELD
_PERMISSION_WINERRORS = frozenset({5, 1314})

DEVELOPER_MODE_HINT = (
    "Permission denied while creating links. On Windows, enable Developer Mode "
    "(Settings → Privacy & Security → For developers → Developer Mode) or switch "
    "entry-directory views to link_type: junction."
)

ACCESS_HINT = (
    "Permission denied. Check that the target directory is writable and that "
    "the library files are readable by this user."
)


def _is_permission_error(error: BaseException) -> bool:
    if isinstance(error, (PermissionError, PermissionDeniedError)):
        return True
    if isinstance(error, OSError):
        if error.errno in _PERMISSION_ERRNOS:
            return True
        if getattr(error, "winerror", None) in _PERMISSION_WINERRORS:
            return True
    return False


def classify(error: BaseException) -> ErrorCategory:
    """Return PERMISSION_DENIED for access errors (or errors caused by one), else OTHER."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if _is_permission_error(current):
            return ErrorCategory.PERMISSION_DENIED
        seen.add(id(current))
        current = current.__cause__
    return ErrorCategory.OTHER


def remediation_hint(category: ErrorCategory, mode: SyncMode) -> Optional[str]:
    """Message for the user, or None when there is nothing specific to suggest."""
    if category != ErrorCategory.PERMISSION_DENIED:
        return None
    if mode in (SyncMode.ENTRY_DIRECTORY, SyncMode.ENTRY_FILE):
        return DEVELOPER_MODE_HINT
    return ACCESS_HINT
