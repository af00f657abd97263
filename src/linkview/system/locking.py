# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/system/locking.py

"""
Run lock for sync operations.

At most one run may execute against a given target directory and index at
a time; concurrent runs would race on the index and on target entries. The
lock is a file created with O_EXCL next to the persisted index. A lock whose
owner process is gone, or which is older than the stale threshold, is
taken over.
"""

import os
import socket
import time
import uuid
from datetime import datetime, timedelta, UTC
from pathlib import Path

import loguru
import orjson

logger = loguru.logger


class LockInfo:
    """Information about an active lock."""

    def __init__(self, operation: str, timestamp: str, pid: int, hostname: str, lock_id: str):
        self.operation = operation
        self.timestamp = timestamp
        self.pid = pid
        self.hostname = hostname
        self.lock_id = lock_id

    def to_dict(self) -> dict[str, str | int]:
        return {
            "operation": self.operation,
            "timestamp": self.timestamp,
            "pid": self.pid,
            "hostname": self.hostname,
            "lock_id": self.lock_id
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | int]) -> "LockInfo":
        return cls(
            operation=str(data["operation"]),
            timestamp=str(data["timestamp"]),
            pid=int(data["pid"]),
            hostname=str(data["hostname"]),
            lock_id=str(data["lock_id"])
        )


class LockError(Exception):
    """Base exception for locking errors."""


class LockConflictError(LockError):
    """Raised when lock is held by another run."""

    def __init__(self, message: str, holder: LockInfo | None = None):
        self.holder = holder
        super().__init__(message)


def _pid_alive(pid: int) -> bool:
    if os.name == "nt":
        # os.kill(pid, 0) terminates the process on Windows
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


class RunLock:
    """
    File-based lock serializing sync runs of one view.

    Usage as context manager:
        with RunLock(lock_path, operation="sync"):
            # Perform sync run
            pass
    """

    DEFAULT_TIMEOUT_SECONDS = 0.0
    STALE_LOCK_MINUTES = 60
    UNREADABLE_GRACE_SECONDS = 5.0

    def __init__(self, lock_path: Path, operation: str = "sync",
                 timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
                 stale_minutes: float = STALE_LOCK_MINUTES):
        """
        Initialize run lock.

        Args:
            lock_path: Lock file location
            operation: Type of operation ("sync", "watch")
            timeout_seconds: How long to wait for a held lock (0 = fail immediately)
            stale_minutes: Age after which a lock is considered abandoned
        """
        self.lock_path = Path(lock_path)
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        self.stale_threshold = timedelta(minutes=stale_minutes)
        self._lock_id: str | None = None
        self._acquired = False

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    @property
    def acquired(self) -> bool:
        return self._acquired

    def acquire(self) -> bool:
        """
        Acquire the lock.

        Returns:
            True once the lock is held

        Raises:
            LockConflictError: If another active run holds the lock
            LockError: If the lock file cannot be created
        """
        if self._acquired:
            logger.warning("Lock already acquired by this instance")
            return True

        self._lock_id = str(uuid.uuid4())
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self.timeout_seconds

        while True:
            if self._try_acquire_lock():
                logger.debug(f"Acquired {self.operation} lock {self._lock_id} at {self.lock_path}")
                self._acquired = True
                return True

            holder = self._get_current_lock_info()
            if self._can_take_over(holder):
                if holder is not None:
                    logger.info(f"Taking over stale lock from pid {holder.pid} ({holder.timestamp})")
                self._remove_lock_file()
                continue

            if time.monotonic() >= deadline:
                if holder is None:
                    raise LockConflictError(f"Lock file {self.lock_path} is being written by another run")
                raise LockConflictError(
                    f"Another {holder.operation} run holds the lock since {holder.timestamp} "
                    f"(pid {holder.pid} on {holder.hostname})",
                    holder=holder,
                )
            time.sleep(min(1.0, max(0.01, self.timeout_seconds / 10)))

    def release(self) -> bool:
        """
        Release the lock held by this instance.

        Returns:
            True if released (or nothing to release), False if held by someone else
        """
        if not self._acquired or not self._lock_id:
            return True

        current = self._get_current_lock_info()
        if current is not None and current.lock_id != self._lock_id:
            logger.warning(f"Lock held by different run (their id: {current.lock_id}, our id: {self._lock_id})")
            self._acquired = False
            return False

        self._remove_lock_file()
        logger.debug(f"Released lock {self._lock_id}")
        self._lock_id = None
        self._acquired = False
        return True

    def is_locked(self) -> tuple[bool, LockInfo | None]:
        """
        Check if another run currently holds the lock.

        Returns:
            (is_locked, lock_info) where lock_info is None if not locked
        """
        info = self._get_current_lock_info()
        if info is None or self._is_stale_lock(info):
            return False, None
        return True, info

    def _try_acquire_lock(self) -> bool:
        lock_info = LockInfo(
            operation=self.operation,
            timestamp=datetime.now(UTC).isoformat(),
            pid=os.getpid(),
            hostname=socket.gethostname(),
            lock_id=self._lock_id or ""
        )
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False
        except OSError as e:
            raise LockError(f"Failed to create lock file {self.lock_path}: {e}") from e
        with os.fdopen(fd, "wb") as f:
            f.write(orjson.dumps(lock_info.to_dict()))
        return True

    def _get_current_lock_info(self) -> LockInfo | None:
        try:
            return LockInfo.from_dict(orjson.loads(self.lock_path.read_bytes()))
        except FileNotFoundError:
            return None
        except Exception as e:
            logger.warning(f"Error reading lock file {self.lock_path}: {e}")
            return None

    def _can_take_over(self, holder: LockInfo | None) -> bool:
        if holder is not None:
            return self._is_stale_lock(holder)
        # unreadable: possibly mid-write by its creator
        try:
            age = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return True
        return age > self.UNREADABLE_GRACE_SECONDS

    def _is_stale_lock(self, lock_info: LockInfo) -> bool:
        try:
            lock_time = datetime.fromisoformat(lock_info.timestamp)
        except ValueError:
            return True
        if datetime.now(UTC) - lock_time > self.stale_threshold:
            return True
        if lock_info.hostname == socket.gethostname() and not _pid_alive(lock_info.pid):
            return True
        return False

    def _remove_lock_file(self) -> None:
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            pass
