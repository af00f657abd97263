# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/core/scheduler.py

"""Interval loop that keeps an active view in sync."""

import time
from typing import Callable, Optional

import loguru

from linkview.config.manager import Config
from linkview.core.lifecycle import SyncRunReport, run_sync
from linkview.system.exceptions import LinkViewError
from linkview.system.locking import LockError, LockConflictError

logger = loguru.logger


class SyncScheduler:
    """
    Run sync for one view every `sync_interval` seconds.

    Runs never overlap: a tick that finds the run lock held is skipped.
    Run-level failures are logged and the loop carries on with the next tick.
    """

    def __init__(self, config: Config,
                 runner: Callable[[Config], SyncRunReport] = run_sync,
                 sleep: Callable[[float], None] = time.sleep,
                 force: bool = False):
        self.config = config
        self.runner = runner
        self.sleep = sleep
        self.force = force
        self.runs = 0
        self.failures = 0
        self.last_report: Optional[SyncRunReport] = None

    @property
    def interval(self) -> int:
        return self.config.view.sync_interval

    @property
    def enabled(self) -> bool:
        return self.force or self.config.view.active

    def tick(self) -> Optional[SyncRunReport]:
        """
        Perform one run.

        Returns:
            The run report, or None if the view is inactive, the lock is held
            by another run, or the run failed
        """
        if not self.enabled:
            logger.debug(f"View '{self.config.view.name}' is inactive, skipping")
            return None

        try:
            report = self.runner(self.config)
        except LockConflictError as e:
            logger.info(f"Skipping scheduled sync: {e}")
            return None
        except (LinkViewError, LockError) as e:
            self.failures += 1
            logger.error(f"Scheduled sync of view '{self.config.view.name}' failed: {e}")
            return None

        self.runs += 1
        self.last_report = report
        return report

    def run_forever(self, max_runs: Optional[int] = None) -> int:
        """
        Tick every interval until interrupted or max_runs ticks have happened.

        Returns:
            Number of ticks performed
        """
        ticks = 0
        logger.info(f"Watching view '{self.config.view.name}' every {self.interval}s")
        while max_runs is None or ticks < max_runs:
            self.tick()
            ticks += 1
            if max_runs is not None and ticks >= max_runs:
                break
            self.sleep(self.interval)
        return ticks


# done.
