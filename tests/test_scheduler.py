# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_scheduler.py

from unittest.mock import Mock

import pytest

from linkview.core.lifecycle import run_lock_for
from linkview.core.scheduler import SyncScheduler
from linkview.system.exceptions import TargetDirUnavailableError
from linkview.system.locking import LockConflictError


@pytest.fixture
def config(view_setup):
    return view_setup.load()


class TestTick:
    def test_runs_when_active(self, config):
        runner = Mock(return_value="report")
        scheduler = SyncScheduler(config, runner=runner)

        assert scheduler.tick() == "report"
        runner.assert_called_once_with(config)
        assert scheduler.runs == 1
        assert scheduler.last_report == "report"

    def test_inactive_view_skipped(self, view_setup):
        view_setup.rewrite_config(active=False)
        runner = Mock()
        scheduler = SyncScheduler(view_setup.load(), runner=runner)

        assert scheduler.tick() is None
        runner.assert_not_called()

    def test_force_runs_inactive_view(self, view_setup):
        view_setup.rewrite_config(active=False)
        runner = Mock(return_value="report")
        scheduler = SyncScheduler(view_setup.load(), runner=runner, force=True)

        assert scheduler.tick() == "report"

    def test_lock_conflict_skips_tick(self, config):
        runner = Mock(side_effect=LockConflictError("busy"))
        scheduler = SyncScheduler(config, runner=runner)

        assert scheduler.tick() is None
        assert scheduler.runs == 0
        assert scheduler.failures == 0

    def test_real_lock_conflict_skips_tick(self, config, view_setup):
        scheduler = SyncScheduler(config)
        with run_lock_for(config):
            assert scheduler.tick() is None
        assert not view_setup.target.exists()

    def test_run_error_logged_and_counted(self, config):
        runner = Mock(side_effect=TargetDirUnavailableError("gone", path="/x"))
        scheduler = SyncScheduler(config, runner=runner)

        assert scheduler.tick() is None
        assert scheduler.failures == 1

    def test_unexpected_error_propagates(self, config):
        scheduler = SyncScheduler(config, runner=Mock(side_effect=RuntimeError("bug")))
        with pytest.raises(RuntimeError):
            scheduler.tick()


class TestRunForever:
    def test_sleeps_interval_between_runs(self, config):
        sleep = Mock()
        runner = Mock(return_value="report")
        scheduler = SyncScheduler(config, runner=runner, sleep=sleep)

        ticks = scheduler.run_forever(max_runs=3)

        assert ticks == 3
        assert runner.call_count == 3
        assert sleep.call_count == 2
        sleep.assert_called_with(config.view.sync_interval)

    def test_continues_after_failures(self, config):
        runner = Mock(side_effect=[
            TargetDirUnavailableError("gone"),
            LockConflictError("busy"),
            "report",
        ])
        scheduler = SyncScheduler(config, runner=runner, sleep=Mock())

        scheduler.run_forever(max_runs=3)

        assert scheduler.failures == 1
        assert scheduler.runs == 1
        assert scheduler.last_report == "report"

    def test_real_runs(self, config, view_setup):
        scheduler = SyncScheduler(config, sleep=Mock())
        scheduler.run_forever(max_runs=2)

        assert scheduler.runs == 2
        assert scheduler.last_report.plan.is_empty()
        assert len(list(view_setup.target.iterdir())) == 3
