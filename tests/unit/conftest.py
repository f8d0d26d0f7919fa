"""Shared fixtures for dynamo_stream_subscriber unit tests."""

from typing import Mapping, Optional
from unittest.mock import Mock

import pytest

from dynamo_stream_subscriber.events import EventSink
from dynamo_stream_subscriber.streams_client import StreamsClient
from dynamo_stream_subscriber.types import TickCallback

STREAM_ARN = (
    "arn:aws:dynamodb:us-east-1:123456789012:table/orders/stream/"
    "2024-01-01T00:00:00.000"
)


class MockMetrics:
    """Mock metrics recorder for testing."""

    def __init__(self) -> None:
        self.counts: list[tuple[str, int, Optional[Mapping[str, str]]]] = []

    def count(
        self,
        name: str,
        value: int,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.counts.append((name, value, dimensions))

    def total(self, name: str) -> int:
        return sum(value for n, value, _ in self.counts if n == name)


class ManualJob:
    """Job handle whose ticks are fired by the test."""

    def __init__(self, interval: float, on_tick: TickCallback) -> None:
        self.interval = interval
        self.on_tick = on_tick
        self.cancelled = False
        self.done_calls = 0

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run one tick synchronously and count done signals."""
        if self.cancelled:
            return

        def done() -> None:
            self.done_calls += 1

        self.on_tick(done)


class ManualScheduler:
    """Scheduler stub that records jobs instead of running them."""

    def __init__(self) -> None:
        self.jobs: list[ManualJob] = []

    def schedule(self, interval: float, on_tick: TickCallback) -> ManualJob:
        job = ManualJob(interval, on_tick)
        self.jobs.append(job)
        return job

    @property
    def job(self) -> ManualJob:
        return self.jobs[-1]


class RecordingSink(EventSink):
    """EventSink that keeps everything it emits."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[tuple[dict, Optional[dict]]] = []
        self.errors: list[BaseException] = []
        self.add_record_listener(lambda r, k: self.records.append((r, k)))
        self.add_error_listener(self.errors.append)


def shard_desc(shard_id: str, closed: bool = False) -> dict:
    """Build a describe_stream shard entry."""
    sequence_range = {"StartingSequenceNumber": "100"}
    if closed:
        sequence_range["EndingSequenceNumber"] = "200"
    return {"ShardId": shard_id, "SequenceNumberRange": sequence_range}


def describe_page(shards: list[dict], last_evaluated: Optional[str] = None) -> dict:
    """Build a describe_stream response page."""
    description: dict = {"StreamArn": STREAM_ARN, "Shards": shards}
    if last_evaluated:
        description["LastEvaluatedShardId"] = last_evaluated
    return {"StreamDescription": description}


def stream_record(event_id: str, keys: Optional[dict] = None) -> dict:
    """Build a get_records record."""
    dynamodb: dict = {"SequenceNumber": event_id, "StreamViewType": "KEYS_ONLY"}
    if keys is not None:
        dynamodb["Keys"] = keys
    return {"eventID": event_id, "eventName": "INSERT", "dynamodb": dynamodb}


@pytest.fixture
def mock_metrics() -> MockMetrics:
    """Provide a MockMetrics instance for testing."""
    return MockMetrics()


@pytest.fixture
def client() -> Mock:
    """StreamsClient mock with no configured responses."""
    return Mock(spec=StreamsClient)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


__all__ = [
    "STREAM_ARN",
    "ManualJob",
    "ManualScheduler",
    "MockMetrics",
    "RecordingSink",
    "describe_page",
    "mock_metrics",
    "shard_desc",
    "stream_record",
]
