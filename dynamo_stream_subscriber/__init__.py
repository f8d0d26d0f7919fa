"""
Client-side DynamoDB Streams subscriber.

This package discovers the open shards of a table's change stream, polls
them on a fixed interval and republishes every record as an event, rebuilding
its shard directory whenever shards close or rotate.
"""

__version__ = "0.1.0"

from dynamo_stream_subscriber.config import SubscriberConfig, get_config
from dynamo_stream_subscriber.discovery import (
    discover_open_shards,
    is_open_shard,
)
from dynamo_stream_subscriber.events import EventSink
from dynamo_stream_subscriber.keys import extract_key, extract_record_key
from dynamo_stream_subscriber.models import (
    ChangeRecord,
    Shard,
    ShardDirectory,
    SubscriberState,
)
from dynamo_stream_subscriber.poll_cycle import PollCycleEngine
from dynamo_stream_subscriber.resolution import resolve_stream_arn
from dynamo_stream_subscriber.scheduler import IntervalScheduler, ScheduledJob
from dynamo_stream_subscriber.shared_exceptions import (
    ShardDiscoveryError,
    ShardReadError,
    StreamResolutionError,
    StreamServiceError,
    StreamSubscriberError,
)
from dynamo_stream_subscriber.stream import SubscriberStream
from dynamo_stream_subscriber.streams_client import StreamsClient
from dynamo_stream_subscriber.subscriber import DynamoDBStreamSubscriber

__all__ = [
    "__version__",
    "ChangeRecord",
    "DynamoDBStreamSubscriber",
    "EventSink",
    "IntervalScheduler",
    "PollCycleEngine",
    "ScheduledJob",
    "Shard",
    "ShardDirectory",
    "ShardDiscoveryError",
    "ShardReadError",
    "StreamResolutionError",
    "StreamServiceError",
    "StreamSubscriberError",
    "StreamsClient",
    "SubscriberConfig",
    "SubscriberState",
    "SubscriberStream",
    "discover_open_shards",
    "extract_key",
    "extract_record_key",
    "get_config",
    "is_open_shard",
    "resolve_stream_arn",
]
