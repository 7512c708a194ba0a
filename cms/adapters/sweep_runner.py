"""
Background runner for the scheduled-publish sweep.

Runs a daemon thread that calls the sweep at a fixed interval until stopped.
Each run is recorded in last_run for health reporting.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from cms.components.scheduler import SweepFailure, SweepOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepReport:
    """Outcome of one sweep run."""

    started_at: datetime
    finished_at: datetime
    published: int = 0
    failures: list[SweepFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures


class SweepRunner:
    """
    Periodic sweep with background polling.

    The first sweep runs one interval after start(). trigger_now() runs a
    sweep on the calling thread.
    """

    def __init__(
        self,
        sweep: Callable[[], SweepOutput],
        interval_seconds: float = 60.0,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize runner.

        Args:
            sweep: Runs one sweep and returns its output
            interval_seconds: Interval between sweeps
            now: Clock for report timestamps
        """
        self._sweep = sweep
        self._interval = interval_seconds
        self._now = now or (lambda: datetime.now(UTC))
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._running = False
        self._last_run: SweepReport | None = None

    def start(self) -> None:
        """Start the background sweep."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, name="sweep-runner", daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Sweep runner started (interval: %.1fs)", self._interval)

    def stop(self) -> None:
        """Stop the runner, waiting for an in-flight sweep to finish."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Sweep runner stopped")

    def trigger_now(self) -> SweepReport:
        """Run one sweep immediately and record it."""
        started = self._now()
        try:
            output = self._sweep()
        except Exception as e:
            logger.exception("Sweep failed")
            report = SweepReport(started_at=started, finished_at=self._now(), error=str(e))
        else:
            report = SweepReport(
                started_at=started,
                finished_at=self._now(),
                published=output.published,
                failures=list(output.failures),
            )
            for failure in output.failures:
                logger.warning("Sweep could not publish %s: %s", failure.item_id, failure.message)
        with self._lock:
            self._last_run = report
        return report

    @property
    def is_running(self) -> bool:
        """Check if the runner is active."""
        return self._running

    @property
    def last_run(self) -> SweepReport | None:
        with self._lock:
            return self._last_run

    def _poll_loop(self) -> None:
        """Background polling loop."""
        while not self._stop_event.wait(timeout=self._interval):
            self.trigger_now()
