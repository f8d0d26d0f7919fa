"""
Fixed-interval scheduler running tick callbacks on a background thread.

A tick receives a ``done`` callable and the next tick is not started until
``done`` has been called, so ticks of one job never overlap.
"""

import logging
import threading
import time
from typing import Optional

from dynamo_stream_subscriber.types import TickCallback

logger = logging.getLogger(__name__)


class ScheduledJob:
    """
    Handle for a scheduled tick callback.

    Attributes:
        interval: Seconds between the starts of consecutive ticks
        name: Name of the worker thread
    """

    def __init__(
        self,
        interval: float,
        on_tick: TickCallback,
        name: str = "stream-poller",
        start_immediately: bool = True,
    ) -> None:
        self.interval = interval
        self.name = name
        self._on_tick = on_tick
        self._start_immediately = start_immediately
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    def start(self) -> "ScheduledJob":
        """Start the worker thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Scheduled job %s already running", self.name)
            return self

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._worker, name=self.name, daemon=True
        )
        self._thread.start()
        logger.info(
            "Started scheduled job %s (interval: %.3fs)", self.name, self.interval
        )
        return self

    def cancel(self) -> None:
        """
        Stop future ticks. A tick already in progress runs to completion.
        """
        if self._stop_event.is_set():
            return
        logger.info("Cancelling scheduled job %s", self.name)
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit."""
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    @property
    def is_active(self) -> bool:
        """Whether further ticks may still run."""
        return bool(
            self._thread
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def _run_tick(self) -> None:
        done = threading.Event()
        try:
            self._on_tick(done.set)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Tick of scheduled job %s raised", self.name)
            done.set()
        done.wait()
        self.ticks += 1

    def _worker(self) -> None:
        logger.debug("Scheduled job %s worker started", self.name)

        if not self._start_immediately and self._stop_event.wait(self.interval):
            return

        while not self._stop_event.is_set():
            started = time.monotonic()
            self._run_tick()

            # Fixed rate from the start of the previous tick; an overrunning
            # tick is followed immediately by the next one.
            delay = max(0.0, started + self.interval - time.monotonic())
            if self._stop_event.wait(delay):
                break

        logger.debug("Scheduled job %s worker stopped", self.name)


class IntervalScheduler:  # pylint: disable=too-few-public-methods
    """Creates and starts ScheduledJob instances."""

    def __init__(self, start_immediately: bool = True) -> None:
        self.start_immediately = start_immediately

    def schedule(
        self,
        interval: float,
        on_tick: TickCallback,
        name: str = "stream-poller",
    ) -> ScheduledJob:
        """
        Invoke ``on_tick`` every ``interval`` seconds until cancelled.

        Args:
            interval: Seconds between tick starts
            on_tick: Callback receiving a ``done`` callable
            name: Worker thread name

        Returns:
            The running job; call ``cancel()`` to stop it
        """
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        job = ScheduledJob(
            interval,
            on_tick,
            name=name,
            start_immediately=self.start_immediately,
        )
        return job.start()


__all__ = ["IntervalScheduler", "ScheduledJob"]
