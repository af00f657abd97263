# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/system/exceptions.py

"""
linkview-specific exception classes.

Run-level errors (configuration, target directory, catalog, index store)
abort a sync before any item is touched. Per-item errors derive from
SyncItemError and are collected into SyncResult.errors instead of raised.
"""


class LinkViewError(Exception):
    """Base exception for all linkview errors."""
    pass


class ConfigError(LinkViewError):
    """Raised when there are configuration validation or loading errors."""
    pass


class UnsupportedModeError(LinkViewError):
    """Raised when a sync mode is not one of the recognized values."""

    def __init__(self, mode: object):
        self.mode = mode
        super().__init__(
            f"Unsupported sync mode: {mode!r} "
            "(expected 'entry-directory', 'entry-file' or 'copy')"
        )


class TargetDirUnavailableError(LinkViewError):
    """Raised when the target directory cannot be created or accessed.

    Fatal to the run: raised before any plan is executed.
    """

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)


class CatalogError(LinkViewError):
    """Raised when the library catalog cannot be read."""
    pass


class IndexStoreError(LinkViewError):
    """Raised when the persisted sync index cannot be read or written."""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)


# === PER-ITEM ERRORS ===

class SyncItemError(LinkViewError):
    """Base class for errors that affect a single item or target path."""

    def __init__(self, message: str, item_id: str = None, path: str = None):
        self.item_id = item_id
        self.path = path
        super().__init__(message)


class SourceMissingError(SyncItemError):
    """The item's source file does not exist. Demoted to a skip."""
    pass


class PermissionDeniedError(SyncItemError):
    """The link/copy primitive was refused by the operating system."""
    pass


class OperationFailedError(SyncItemError):
    """Any other failure while creating or removing a target entry."""
    pass
