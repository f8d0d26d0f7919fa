"""
Observer-style output channels for records and errors.
"""

import logging
import threading

from dynamo_stream_subscriber.models import ChangeRecord
from dynamo_stream_subscriber.types import ErrorListener, RecordListener

logger = logging.getLogger(__name__)


class EventSink:
    """
    Holds record and error listeners and dispatches to them in order.

    Record listeners receive ``(record, key)``; error listeners receive the
    exception. An error emitted with no error listener is logged instead of
    raised, since nothing upstream of a poll cycle could handle it.
    """

    def __init__(self) -> None:
        self._record_listeners: list[RecordListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._lock = threading.Lock()

    def add_record_listener(self, listener: RecordListener) -> None:
        with self._lock:
            self._record_listeners.append(listener)

    def add_error_listener(self, listener: ErrorListener) -> None:
        with self._lock:
            self._error_listeners.append(listener)

    def remove_record_listener(self, listener: RecordListener) -> None:
        with self._lock:
            if listener in self._record_listeners:
                self._record_listeners.remove(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        with self._lock:
            if listener in self._error_listeners:
                self._error_listeners.remove(listener)

    def emit_record(self, change: ChangeRecord) -> None:
        """Deliver a record and its key to every record listener."""
        with self._lock:
            listeners = list(self._record_listeners)
        for listener in listeners:
            listener(change.record, change.key)

    def emit_error(self, error: BaseException) -> None:
        """Deliver an error to every error listener."""
        with self._lock:
            listeners = list(self._error_listeners)
        if not listeners:
            logger.warning(
                "Unhandled subscriber error: %s",
                error,
                extra={"error_type": type(error).__name__},
            )
            return
        for listener in listeners:
            listener(error)

    @property
    def has_error_listeners(self) -> bool:
        with self._lock:
            return bool(self._error_listeners)


__all__ = ["EventSink"]
