"""
Data models for DynamoDB stream subscription.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from dynamo_stream_subscriber.types import DynamoDBStreamRecord


class SubscriberState(str, Enum):
    """Lifecycle states of a stream subscriber."""

    CREATED = "created"
    RESOLVING = "resolving"
    DISCOVERING = "discovering"
    POLLING = "polling"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class Shard:
    """
    One open partition of the change stream and its read cursor.

    ``iterator`` is replaced after every read with the service-provided next
    iterator and becomes None once the shard is closed and drained.
    """

    shard_id: str
    iterator: Optional[str] = None
    parent_shard_id: Optional[str] = None

    @property
    def is_exhausted(self) -> bool:
        """Whether the shard has no iterator left to read from."""
        return self.iterator is None


@dataclass
class ShardDirectory:
    """Snapshot of open shards produced by a single discovery pass."""

    shards: list[Shard] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for shard in self.shards:
            if shard.shard_id in seen:
                raise ValueError(f"Duplicate shard id: {shard.shard_id}")
            seen.add(shard.shard_id)

    def __iter__(self) -> Iterator[Shard]:
        return iter(self.shards)

    def __len__(self) -> int:
        return len(self.shards)

    @property
    def shard_ids(self) -> list[str]:
        """Shard ids in discovery order."""
        return [shard.shard_id for shard in self.shards]

    @property
    def readable_shards(self) -> list[Shard]:
        """Shards that still hold an iterator."""
        return [shard for shard in self.shards if not shard.is_exhausted]

    @property
    def is_stale(self) -> bool:
        """A directory is stale when empty or any shard lost its iterator."""
        return not self.shards or any(s.is_exhausted for s in self.shards)

    def get(self, shard_id: str) -> Optional[Shard]:
        """Return the shard with the given id, if present."""
        for shard in self.shards:
            if shard.shard_id == shard_id:
                return shard
        return None


@dataclass(frozen=True)
class ChangeRecord:
    """A stream record paired with its decoded primary key."""

    record: DynamoDBStreamRecord
    key: Optional[dict[str, object]]

    @property
    def event_name(self) -> Optional[str]:
        """INSERT, MODIFY or REMOVE, when present on the record."""
        return self.record.get("eventName")

    @property
    def sequence_number(self) -> Optional[str]:
        """Sequence number of the record within its shard."""
        return self.record.get("dynamodb", {}).get("SequenceNumber")


__all__ = [
    "ChangeRecord",
    "Shard",
    "ShardDirectory",
    "SubscriberState",
]
