"""Tests for shard, directory and change record models."""

import pytest

from dynamo_stream_subscriber.models import (
    ChangeRecord,
    Shard,
    ShardDirectory,
    SubscriberState,
)

from .conftest import stream_record


@pytest.mark.unit
class TestShardDirectory:
    """Staleness and lookup behaviour of ShardDirectory."""

    def test_empty_directory_is_stale(self) -> None:
        assert ShardDirectory().is_stale
        assert len(ShardDirectory()) == 0

    def test_directory_with_iterators_is_not_stale(self) -> None:
        directory = ShardDirectory(
            [Shard("shard-1", "it-1"), Shard("shard-2", "it-2")]
        )
        assert not directory.is_stale
        assert directory.shard_ids == ["shard-1", "shard-2"]

    def test_any_exhausted_shard_makes_directory_stale(self) -> None:
        directory = ShardDirectory([Shard("shard-1", "it-1"), Shard("shard-2")])
        assert directory.is_stale
        assert [s.shard_id for s in directory.readable_shards] == ["shard-1"]

    def test_iterator_mutation_changes_staleness(self) -> None:
        shard = Shard("shard-1", "it-1")
        directory = ShardDirectory([shard])

        shard.iterator = None

        assert shard.is_exhausted
        assert directory.is_stale

    def test_duplicate_shard_ids_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate shard id"):
            ShardDirectory([Shard("shard-1", "a"), Shard("shard-1", "b")])

    def test_get_by_id(self) -> None:
        shard = Shard("shard-2", "it")
        directory = ShardDirectory([Shard("shard-1", "it"), shard])

        assert directory.get("shard-2") is shard
        assert directory.get("missing") is None

    def test_iteration_preserves_order(self) -> None:
        shards = [Shard(f"shard-{i}", "it") for i in range(3)]
        assert list(ShardDirectory(shards)) == shards


@pytest.mark.unit
def test_change_record_accessors() -> None:
    record = stream_record("seq-1", {"id": {"S": "42"}})
    change = ChangeRecord(record, {"id": "42"})

    assert change.event_name == "INSERT"
    assert change.sequence_number == "seq-1"
    assert change.key == {"id": "42"}


@pytest.mark.unit
def test_subscriber_state_values() -> None:
    assert SubscriberState("polling") is SubscriberState.POLLING
    assert SubscriberState.FAILED.value == "failed"
