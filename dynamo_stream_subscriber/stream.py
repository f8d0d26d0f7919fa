"""
Pull-based iterator over a subscriber's records.
"""

import logging
import queue
import threading
from typing import Any, Literal, Optional, Union

from dynamo_stream_subscriber.models import ChangeRecord, SubscriberState
from dynamo_stream_subscriber.subscriber import DynamoDBStreamSubscriber
from dynamo_stream_subscriber.types import DynamoDBStreamRecord

logger = logging.getLogger(__name__)

_CLOSED = object()

BufferItem = Union[ChangeRecord, BaseException, object]


class SubscriberStream:
    """
    Iterate over change records as they are polled.

    Polling starts on the first ``next()``. Once ``high_water_mark`` records
    are buffered the subscriber is stopped, and it is started again when the
    consumer has drained the buffer below the mark. Error events are raised
    from the following ``next()`` call. After a failed start the next
    ``next()`` starts the subscriber again.

    Example:
        ```python
        with SubscriberStream(table_name="orders") as stream:
            for change in stream:
                print(change.event_name, change.key)
        ```
    """

    def __init__(
        self,
        subscriber: Optional[DynamoDBStreamSubscriber] = None,
        high_water_mark: int = 16,
        **settings: Any,
    ) -> None:
        if high_water_mark < 1:
            raise ValueError("high_water_mark must be at least 1")
        self.subscriber = subscriber or DynamoDBStreamSubscriber(**settings)
        self.high_water_mark = high_water_mark

        self._buffer: "queue.Queue[BufferItem]" = queue.Queue()
        self._lock = threading.Lock()
        self._started = False
        self._paused = False
        self._closed = False

        self.subscriber.on_record(self._push_record)
        self.subscriber.on_error(self._push_error)

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def buffered(self) -> int:
        """Number of items waiting to be consumed."""
        return self._buffer.qsize()

    def _push_record(
        self, record: DynamoDBStreamRecord, key: Optional[dict[str, object]]
    ) -> None:
        if self._closed:
            return
        self._buffer.put(ChangeRecord(record, key))
        with self._lock:
            if self._paused or self._buffer.qsize() < self.high_water_mark:
                return
            self._paused = True
        logger.debug(
            "Buffer reached %d records, pausing subscriber", self.high_water_mark
        )
        self.subscriber.stop()

    def _push_error(self, error: BaseException) -> None:
        if not self._closed:
            self._buffer.put(error)

    def _ensure_flowing(self) -> None:
        with self._lock:
            if self._closed:
                return
            if not self._started:
                self._started = True
                resume = not self._paused
            elif self._paused and self._buffer.qsize() < self.high_water_mark:
                self._paused = False
                resume = True
                logger.debug("Buffer drained, resuming subscriber")
            elif (
                not self._paused
                and self._buffer.empty()
                and self.subscriber.state == SubscriberState.FAILED
            ):
                # Nothing will arrive until the subscriber is started again
                resume = True
                logger.debug("Subscriber failed to start, retrying")
            else:
                resume = False
        if resume:
            self.subscriber.start()

    def __iter__(self) -> "SubscriberStream":
        return self

    def __next__(self) -> ChangeRecord:
        self._ensure_flowing()
        item = self._buffer.get()
        if item is _CLOSED:
            # Keep the stream exhausted for later calls
            self._buffer.put(_CLOSED)
            raise StopIteration
        if isinstance(item, BaseException):
            raise item
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop polling and end iteration once buffered records are read."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.subscriber.stop()
        self._buffer.put(_CLOSED)

    def __enter__(self) -> "SubscriberStream":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> Literal[False]:
        self.close()
        return False


__all__ = ["SubscriberStream"]
