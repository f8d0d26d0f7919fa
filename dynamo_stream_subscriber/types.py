"""
TypedDict definitions for DynamoDB Streams responses.

Provides type-safe structures for the describe_stream, get_shard_iterator
and get_records payloads returned by boto3, so the discovery and polling
code can avoid `Any` for service data.
"""

from typing import Callable, Literal, Mapping, Optional, Protocol, TypedDict

# =============================================================================
# DynamoDB Attribute Value Types
# =============================================================================


class AttributeValueS(TypedDict):
    """DynamoDB String attribute value."""

    S: str


class AttributeValueN(TypedDict):
    """DynamoDB Number attribute value (stored as string)."""

    N: str


class AttributeValueB(TypedDict):
    """DynamoDB Binary attribute value."""

    B: bytes


class AttributeValueBOOL(TypedDict):
    """DynamoDB Boolean attribute value."""

    BOOL: bool


class AttributeValueNULL(TypedDict):
    """DynamoDB Null attribute value."""

    NULL: bool


class AttributeValueL(TypedDict):
    """DynamoDB List attribute value."""

    L: list["AttributeValue"]


class AttributeValueM(TypedDict):
    """DynamoDB Map attribute value."""

    M: dict[str, "AttributeValue"]


# Key attributes only ever use scalar types, but stream images may carry any
# of these.
AttributeValue = (
    AttributeValueS
    | AttributeValueN
    | AttributeValueB
    | AttributeValueBOOL
    | AttributeValueNULL
    | AttributeValueL
    | AttributeValueM
)

KeyAttributes = Mapping[str, AttributeValue]


# =============================================================================
# DynamoDB Stream Record Types
# =============================================================================


class StreamRecordDynamoDB(TypedDict, total=False):
    """The 'dynamodb' portion of a DynamoDB stream record."""

    Keys: dict[str, AttributeValue]
    NewImage: dict[str, AttributeValue]
    OldImage: dict[str, AttributeValue]
    SequenceNumber: str
    SizeBytes: int
    StreamViewType: Literal[
        "KEYS_ONLY", "NEW_IMAGE", "OLD_IMAGE", "NEW_AND_OLD_IMAGES"
    ]
    ApproximateCreationDateTime: object


class DynamoDBStreamRecord(TypedDict, total=False):
    """A single record returned by get_records."""

    eventID: str
    eventName: Literal["INSERT", "MODIFY", "REMOVE"]
    eventVersion: str
    eventSource: str
    awsRegion: str
    dynamodb: StreamRecordDynamoDB
    userIdentity: dict[str, str]


# =============================================================================
# DynamoDB Streams API Response Types
# =============================================================================


class SequenceNumberRange(TypedDict, total=False):
    """Sequence number bounds of a shard; closed shards have an ending."""

    StartingSequenceNumber: str
    EndingSequenceNumber: str


class ShardDescription(TypedDict, total=False):
    """One shard entry of a describe_stream page."""

    ShardId: str
    ParentShardId: str
    SequenceNumberRange: SequenceNumberRange


class StreamDescription(TypedDict, total=False):
    """The 'StreamDescription' portion of a describe_stream response."""

    StreamArn: str
    StreamLabel: str
    StreamStatus: Literal["ENABLING", "ENABLED", "DISABLING", "DISABLED"]
    StreamViewType: str
    TableName: str
    Shards: list[ShardDescription]
    LastEvaluatedShardId: str


class DescribeStreamResponse(TypedDict):
    """Response of dynamodbstreams.describe_stream."""

    StreamDescription: StreamDescription


class GetShardIteratorResponse(TypedDict, total=False):
    """Response of dynamodbstreams.get_shard_iterator."""

    ShardIterator: str


class GetRecordsResponse(TypedDict, total=False):
    """Response of dynamodbstreams.get_records."""

    Records: list[DynamoDBStreamRecord]
    NextShardIterator: str


# =============================================================================
# Listener, Scheduling and Metrics Protocols
# =============================================================================

RecordListener = Callable[[DynamoDBStreamRecord, Optional[dict[str, object]]], None]
ErrorListener = Callable[[BaseException], None]
DoneCallback = Callable[[], None]
TickCallback = Callable[[DoneCallback], None]


class JobHandle(Protocol):  # pylint: disable=too-few-public-methods
    """Handle returned by a scheduler for a recurring job."""

    def cancel(self) -> None:
        """Stop future invocations."""


class Scheduler(Protocol):  # pylint: disable=too-few-public-methods
    """Runs a tick callback at a fixed interval until cancelled."""

    def schedule(self, interval: float, on_tick: TickCallback) -> JobHandle:
        """Start invoking on_tick every interval seconds."""


class MetricsRecorder(Protocol):  # pylint: disable=too-few-public-methods
    """Minimal protocol for metrics clients."""

    def count(
        self,
        name: str,
        value: int,
        dimensions: Mapping[str, str] | None = None,
    ) -> object:
        """Record a count metric."""
        return None


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Attribute value types
    "AttributeValue",
    "AttributeValueS",
    "AttributeValueN",
    "AttributeValueB",
    "AttributeValueBOOL",
    "AttributeValueNULL",
    "AttributeValueL",
    "AttributeValueM",
    "KeyAttributes",
    # Stream record types
    "StreamRecordDynamoDB",
    "DynamoDBStreamRecord",
    # API response types
    "SequenceNumberRange",
    "ShardDescription",
    "StreamDescription",
    "DescribeStreamResponse",
    "GetShardIteratorResponse",
    "GetRecordsResponse",
    # Callables
    "RecordListener",
    "ErrorListener",
    "DoneCallback",
    "TickCallback",
    # Scheduling
    "JobHandle",
    "Scheduler",
    # Metrics
    "MetricsRecorder",
]
