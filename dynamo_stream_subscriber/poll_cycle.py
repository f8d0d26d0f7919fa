"""
Poll cycle engine driving reads across every shard of a directory.

Each scheduler tick runs one cycle: read every shard concurrently, emit the
records, advance iterators, and rebuild the directory through discovery when
it has gone stale. The cycle is bounded to one rediscovery and one retry.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from dynamo_stream_subscriber.discovery import discover_open_shards
from dynamo_stream_subscriber.events import EventSink
from dynamo_stream_subscriber.keys import extract_record_key
from dynamo_stream_subscriber.models import ChangeRecord, Shard, ShardDirectory
from dynamo_stream_subscriber.shared_exceptions import (
    CURSOR_INVALIDATING_ERRORS,
    ShardDiscoveryError,
    ShardReadError,
    StreamServiceError,
)
from dynamo_stream_subscriber.streams_client import StreamsClient
from dynamo_stream_subscriber.types import (
    DoneCallback,
    GetRecordsResponse,
    MetricsRecorder,
)

logger = logging.getLogger(__name__)


class PollCycleEngine:  # pylint: disable=too-many-instance-attributes
    """
    Runs poll cycles against an exclusively owned ShardDirectory.

    Example:
        ```python
        engine = PollCycleEngine(client, stream_arn, sink, directory)
        job = IntervalScheduler().schedule(10.0, engine.tick)
        ```

    Attributes:
        stream_arn: ARN of the stream being polled
        max_workers: Threads used for concurrent shard reads
        max_records_per_shard: Optional get_records Limit
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        client: StreamsClient,
        stream_arn: str,
        sink: EventSink,
        directory: Optional[ShardDirectory] = None,
        max_workers: int = 8,
        max_records_per_shard: Optional[int] = None,
        shard_page_size: Optional[int] = None,
        metrics: Optional[MetricsRecorder] = None,
    ) -> None:
        self.client = client
        self.stream_arn = stream_arn
        self.sink = sink
        self.max_workers = max_workers
        self.max_records_per_shard = max_records_per_shard
        self.shard_page_size = shard_page_size
        self.metrics = metrics
        self._directory = directory if directory is not None else ShardDirectory()
        self._installed: Optional[ShardDirectory] = None
        self._install_lock = threading.Lock()
        # Serialises ticks across every job driving this engine, including
        # a cancelled job whose last tick is still running
        self._cycle_lock = threading.Lock()

    @property
    def directory(self) -> ShardDirectory:
        """The directory the next cycle polls."""
        with self._install_lock:
            if self._installed is not None:
                return self._installed
            return self._directory

    def install(self, directory: ShardDirectory) -> None:
        """
        Replace the directory wholesale.

        Does not wait for a running cycle; the directory is adopted when the
        next cycle starts.
        """
        with self._install_lock:
            self._installed = directory
        logger.info("Installed shard directory with %d shards", len(directory))

    def _adopt_installed(self) -> None:
        with self._install_lock:
            if self._installed is not None:
                self._directory, self._installed = self._installed, None

    def tick(self, done: DoneCallback) -> None:
        """
        Scheduler entry point: run one cycle, then signal done exactly once.

        Errors raised while emitting (e.g. by a listener) are reported on the
        error channel; done is still signalled.
        """
        try:
            with self._cycle_lock:
                try:
                    self.run_cycle()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.exception("Unexpected error during poll cycle")
                    self._fail(exc)
        finally:
            done()

    def run_cycle(self) -> None:
        """
        Poll every shard, then rediscover and poll once more if stale.

        Failures end the cycle and are emitted on the error channel.
        """
        self._adopt_installed()
        error = self._poll(self._directory)
        if error is not None:
            self._fail(error)
            return

        if not self._directory.is_stale:
            return

        if not self._rediscover():
            return

        error = self._poll(self._directory)
        if error is not None:
            self._fail(error)

    def _rediscover(self) -> bool:
        logger.warning(
            "Some or all shards are closed, retrieving the list of shards",
            extra={"stream_arn": self.stream_arn},
        )
        if self.metrics:
            self.metrics.count("ShardRediscovery", 1)

        self._directory = ShardDirectory()
        try:
            directory = discover_open_shards(
                self.client,
                self.stream_arn,
                max_workers=self.max_workers,
                page_size=self.shard_page_size,
            )
        except ShardDiscoveryError as exc:
            self._fail(exc)
            return False

        self._directory = directory
        return True

    def _read_shard(self, shard: Shard) -> GetRecordsResponse:
        try:
            return self.client.get_records(
                shard.iterator, limit=self.max_records_per_shard
            )
        except StreamServiceError as exc:
            raise ShardReadError(
                f"Failed to read shard {shard.shard_id}: {exc}",
                shard_id=shard.shard_id,
            ) from exc

    def _poll(self, directory: ShardDirectory) -> Optional[ShardReadError]:
        """Read every readable shard; return the first failure, if any."""
        readable = directory.readable_shards
        errors: list[ShardReadError] = []
        if not readable:
            return None

        logger.debug("Polling %d shards", len(readable))
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._read_shard, shard): shard
                for shard in readable
            }
            for future in as_completed(futures):
                shard = futures[future]
                try:
                    response = future.result()
                except ShardReadError as exc:
                    errors.append(exc)
                    self._handle_read_error(shard, exc)
                    continue

                records = response.get("Records") or []
                logger.debug(
                    "get_records (end) Shard: %s, Records: %d, "
                    "has next iterator: %s",
                    shard.shard_id,
                    len(records),
                    bool(response.get("NextShardIterator")),
                )
                for record in records:
                    self.sink.emit_record(
                        ChangeRecord(record, extract_record_key(record))
                    )
                if records and self.metrics:
                    self.metrics.count("StreamRecordsEmitted", len(records))
                shard.iterator = response.get("NextShardIterator")

        return errors[0] if errors else None

    def _handle_read_error(self, shard: Shard, error: ShardReadError) -> None:
        if self.metrics:
            self.metrics.count("ShardReadError", 1, {"shard_id": shard.shard_id})
        if isinstance(error.__cause__, CURSOR_INVALIDATING_ERRORS):
            # The next cycle sees a stale directory and rediscovers
            logger.warning(
                "Dropping unusable iterator for shard %s: %s",
                shard.shard_id,
                error.__cause__,
            )
            shard.iterator = None

    def _fail(self, error: BaseException) -> None:
        logger.error(
            "Poll cycle failed: %s",
            error,
            extra={"stream_arn": self.stream_arn, "error_type": type(error).__name__},
        )
        if self.metrics:
            self.metrics.count("CycleFailed", 1)
        self.sink.emit_error(error)


__all__ = ["PollCycleEngine"]
