"""
Background maintenance worker.

In-process poller that drives everything time based: draining the email
queue, generating requests from due templates and the daily overdue digest.

Key behaviors:
- One background thread, polling every ``poll_interval_seconds``
- Each tick runs the email queue, then generation, then (once per day, at or
  after the configured time) the overdue digest
- A failing step is logged and does not stop the other steps or the loop
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, time
from typing import TYPE_CHECKING

from techmaintain.components.notifications import QueueProcessResult, queue_overdue_digests
from techmaintain.components.runner import GenerationSummary

if TYPE_CHECKING:
    from techmaintain.app_shell.container import Services
    from techmaintain.components.recurrence import ClockPort

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """What one worker tick did. None means the step did not run or failed."""

    emails: QueueProcessResult | None = None
    generation: GenerationSummary | None = None
    overdue_digests: int | None = None


class MaintenanceWorker:
    """
    Maintenance worker with background polling.

    ``tick()`` can also be called directly (CLI, tests).
    """

    def __init__(
        self,
        services: Services,
        clock: ClockPort,
        poll_interval_seconds: float = 60.0,
        overdue_at: time = time(0, 1),
    ) -> None:
        self._services = services
        self._clock = clock
        self._poll_interval = poll_interval_seconds
        self._overdue_at = overdue_at
        self._last_overdue_run: date | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    # --- Jobs ---

    def process_emails(self) -> QueueProcessResult:
        result = self._services.outbox.process_queue()
        if result.total_processed > 0:
            logger.info("Email queue: %d sent, %d failed", result.sent, result.failed)
        return result

    def generate(self) -> GenerationSummary:
        return self._services.runner.generate_due(self._clock.now().date())

    def overdue_due(self) -> bool:
        """Whether the daily overdue digest should run on this tick."""
        now = self._clock.now()
        if self._last_overdue_run == now.date():
            return False
        return now.time() >= self._overdue_at

    def send_overdue(self) -> int:
        today = self._clock.now().date()
        count = queue_overdue_digests(
            self._services.store.requests,
            self._services.store.users,
            self._services.outbox,
            today,
        )
        self._last_overdue_run = today
        return count

    def tick(self) -> TickResult:
        """Run one polling cycle."""
        result = TickResult()

        try:
            result.emails = self.process_emails()
        except Exception:
            logger.exception("Error processing email queue")

        try:
            result.generation = self.generate()
        except Exception:
            logger.exception("Error generating maintenance requests")

        if self.overdue_due():
            try:
                result.overdue_digests = self.send_overdue()
            except Exception:
                logger.exception("Error in daily overdue check")

        return result

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the background worker."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Maintenance worker started (poll interval: %.1fs)", self._poll_interval)

    def stop(self) -> None:
        """Stop the worker gracefully."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Maintenance worker stopped")

    def run_forever(self) -> None:
        """Run in the foreground until interrupted."""
        self.start()
        try:
            while not self._stop_event.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()

    @property
    def is_running(self) -> bool:
        return self._running

    def _poll_loop(self) -> None:
        self.tick()
        while not self._stop_event.wait(timeout=self._poll_interval):
            self.tick()
