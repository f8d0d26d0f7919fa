"""
Subscriber republishing DynamoDB stream records as record and error events.

The subscriber resolves the stream ARN when only a table name is known,
discovers the open shards, and registers a poll cycle with a scheduler. All
failures after construction are delivered to error listeners.
"""

import logging
import threading
from typing import Any, Literal, Optional

from dynamo_stream_subscriber.config import SubscriberConfig
from dynamo_stream_subscriber.discovery import discover_open_shards
from dynamo_stream_subscriber.events import EventSink
from dynamo_stream_subscriber.models import ShardDirectory, SubscriberState
from dynamo_stream_subscriber.poll_cycle import PollCycleEngine
from dynamo_stream_subscriber.resolution import resolve_stream_arn
from dynamo_stream_subscriber.scheduler import IntervalScheduler
from dynamo_stream_subscriber.shared_exceptions import (
    ShardDiscoveryError,
    StreamResolutionError,
)
from dynamo_stream_subscriber.streams_client import StreamsClient
from dynamo_stream_subscriber.types import (
    ErrorListener,
    JobHandle,
    MetricsRecorder,
    RecordListener,
    Scheduler,
)

logger = logging.getLogger(__name__)

_BUSY_STATES = (
    SubscriberState.RESOLVING,
    SubscriberState.DISCOVERING,
    SubscriberState.POLLING,
)


class DynamoDBStreamSubscriber:  # pylint: disable=too-many-instance-attributes
    """
    Polls every open shard of a DynamoDB stream on a fixed interval.

    Example:
        ```python
        subscriber = DynamoDBStreamSubscriber(table_name="orders", region="us-east-1")

        @subscriber.on_record
        def handle(record, key):
            print(record["eventName"], key)

        subscriber.start()
        ...
        subscriber.stop()
        ```
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        config: Optional[SubscriberConfig] = None,
        *,
        client: Optional[StreamsClient] = None,
        scheduler: Optional[Scheduler] = None,
        metrics: Optional[MetricsRecorder] = None,
        **settings: Any,
    ) -> None:
        """
        Initialize the subscriber.

        Args:
            config: Complete configuration; when omitted, ``settings`` are
                passed to SubscriberConfig (e.g. ``stream_arn=...``,
                ``table_name=...``, ``interval=5``, ``region=...``)
            client: Stream client adapter, built from the config if omitted
            scheduler: Scheduler used to drive poll cycles
            metrics: Optional metrics recorder

        Raises:
            pydantic.ValidationError: If the configuration is invalid, e.g.
                neither or both of stream_arn and table_name are given
        """
        if config is not None and settings:
            raise ValueError("pass either a config or settings, not both")
        self.config = config if config is not None else SubscriberConfig(**settings)
        self.client = client or StreamsClient(
            region=self.config.region, endpoint_url=self.config.endpoint_url
        )
        self.scheduler: Scheduler = scheduler or IntervalScheduler()
        self.metrics = metrics
        self.events = EventSink()

        self._stream_arn: Optional[str] = self.config.stream_arn
        self._state = SubscriberState.CREATED
        self._engine: Optional[PollCycleEngine] = None
        self._job: Optional[JobHandle] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def on_record(self, listener: RecordListener) -> RecordListener:
        """Register a ``(record, key)`` listener; usable as a decorator."""
        self.events.add_record_listener(listener)
        return listener

    def on_error(self, listener: ErrorListener) -> ErrorListener:
        """Register an error listener; usable as a decorator."""
        self.events.add_error_listener(listener)
        return listener

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SubscriberState:
        return self._state

    @property
    def stream_arn(self) -> Optional[str]:
        return self._stream_arn

    @property
    def directory(self) -> Optional[ShardDirectory]:
        """The directory being polled, once discovery has run."""
        return self._engine.directory if self._engine else None

    @property
    def is_polling(self) -> bool:
        return self._state == SubscriberState.POLLING

    def _transition(self, state: SubscriberState) -> None:
        logger.info("Subscriber state %s -> %s", self._state.value, state.value)
        self._state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Resolve the stream if needed, discover shards and begin polling.

        Failures are delivered to error listeners and leave the subscriber
        in the FAILED state; nothing is raised.
        """
        with self._lock:
            if self._state in _BUSY_STATES:
                logger.warning(
                    "start() ignored, subscriber is already %s",
                    self._state.value,
                )
                return

            try:
                stream_arn = self._resolve()
                self._transition(SubscriberState.DISCOVERING)
                directory = discover_open_shards(
                    self.client,
                    stream_arn,
                    max_workers=self.config.max_workers,
                    page_size=self.config.shard_page_size,
                )
            except (StreamResolutionError, ShardDiscoveryError) as exc:
                logger.error("Subscriber failed to start: %s", exc)
                self._transition(SubscriberState.FAILED)
                self.events.emit_error(exc)
                return

            # One engine for the subscriber's lifetime, so a cycle left
            # running by stop() still excludes the restarted job's cycles
            if self._engine is None:
                self._engine = PollCycleEngine(
                    self.client,
                    stream_arn,
                    self.events,
                    directory,
                    max_workers=self.config.max_workers,
                    max_records_per_shard=self.config.max_records_per_shard,
                    shard_page_size=self.config.shard_page_size,
                    metrics=self.metrics,
                )
            else:
                self._engine.install(directory)
            self._transition(SubscriberState.POLLING)
            self._job = self.scheduler.schedule(
                self.config.interval_seconds, self._engine.tick
            )

    def _resolve(self) -> str:
        if self._stream_arn:
            return self._stream_arn
        self._transition(SubscriberState.RESOLVING)
        self._stream_arn = resolve_stream_arn(self.client, self.config.table_name)
        return self._stream_arn

    def stop(self) -> None:
        """
        Cancel future poll cycles. A cycle already running is not interrupted.
        """
        with self._lock:
            if self._job is None:
                logger.debug("stop() called before polling started")
                return
            self._job.cancel()
            self._job = None
            self._transition(SubscriberState.STOPPED)

    def __enter__(self) -> "DynamoDBStreamSubscriber":
        """Context manager entry - start polling."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> Literal[False]:
        """Context manager exit - stop polling."""
        self.stop()
        return False  # Don't suppress exceptions


__all__ = ["DynamoDBStreamSubscriber"]
