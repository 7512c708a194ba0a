"""
Background sweep runner tests.
"""

from __future__ import annotations

import threading
from uuid import uuid4

from cms.adapters.sweep_runner import SweepRunner
from cms.components.scheduler import SweepFailure, SweepOutput
from tests.fakes import NOW


def test_trigger_now_records_last_run() -> None:
    runner = SweepRunner(lambda: SweepOutput(published=3), now=lambda: NOW)
    assert runner.last_run is None

    report = runner.trigger_now()

    assert report.published == 3
    assert report.ok
    assert report.started_at == NOW
    assert runner.last_run == report


def test_failures_are_reported() -> None:
    failure = SweepFailure(item_id=uuid4(), message="boom")
    runner = SweepRunner(lambda: SweepOutput(published=0, failures=[failure], success=False))
    report = runner.trigger_now()
    assert report.failures == [failure]
    assert not report.ok


def test_exception_is_captured() -> None:
    def broken() -> SweepOutput:
        raise RuntimeError("database is locked")

    runner = SweepRunner(broken)
    report = runner.trigger_now()
    assert report.error == "database is locked"
    assert runner.last_run is report


def test_background_loop_runs_and_stops() -> None:
    ran = threading.Event()

    def sweep() -> SweepOutput:
        ran.set()
        return SweepOutput()

    runner = SweepRunner(sweep, interval_seconds=0.01)
    runner.start()
    try:
        assert runner.is_running
        assert ran.wait(timeout=2.0)
    finally:
        runner.stop()

    assert not runner.is_running
    assert runner.last_run is not None


def test_start_and_stop_are_idempotent() -> None:
    runner = SweepRunner(SweepOutput, interval_seconds=60)
    runner.stop()
    runner.start()
    runner.start()
    runner.stop()
    runner.stop()
    assert not runner.is_running
