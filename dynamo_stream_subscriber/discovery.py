"""
Discovery of the open shards of a DynamoDB stream.

A discovery pass walks every page of describe_stream, keeps the shards that
have no ending sequence number and fetches a LATEST iterator for each. The
result is a brand new ShardDirectory; nothing is installed unless the whole
walk succeeds.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from dynamo_stream_subscriber.models import Shard, ShardDirectory
from dynamo_stream_subscriber.shared_exceptions import (
    ShardDiscoveryError,
    StreamServiceError,
)
from dynamo_stream_subscriber.streams_client import StreamsClient
from dynamo_stream_subscriber.types import ShardDescription

logger = logging.getLogger(__name__)

# New subscribers only observe writes made after discovery.
ITERATOR_TYPE = "LATEST"


def is_open_shard(shard: ShardDescription) -> bool:
    """A shard is open while it has no ending sequence number."""
    return not shard.get("SequenceNumberRange", {}).get("EndingSequenceNumber")


def _attach_iterator(
    client: StreamsClient, stream_arn: str, description: ShardDescription
) -> Shard:
    shard_id = description["ShardId"]
    response = client.get_shard_iterator(stream_arn, shard_id, ITERATOR_TYPE)
    return Shard(
        shard_id=shard_id,
        iterator=response.get("ShardIterator"),
        parent_shard_id=description.get("ParentShardId"),
    )


def discover_open_shards(
    client: StreamsClient,
    stream_arn: str,
    max_workers: int = 8,
    page_size: Optional[int] = None,
) -> ShardDirectory:
    """
    Build a ShardDirectory of every open shard with a fresh iterator.

    Args:
        client: Stream client adapter used for all service calls
        stream_arn: ARN of the stream to walk
        max_workers: Threads used to fetch iterators within a page
        page_size: Optional describe_stream Limit

    Returns:
        The open shards, in listing order, each with its iterator

    Raises:
        ShardDiscoveryError: If any page or any iterator fetch fails
    """
    shards: list[Shard] = []
    last_evaluated_shard_id: Optional[str] = None
    pages = 0

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        while True:
            try:
                response = client.describe_stream(
                    stream_arn, last_evaluated_shard_id, page_size
                )
                description = response["StreamDescription"]
                open_shards = [
                    s for s in description.get("Shards", []) if is_open_shard(s)
                ]
                logger.debug(
                    "describe_stream (end) page %d, open shards: %d",
                    pages,
                    len(open_shards),
                )
                # map preserves listing order and re-raises the first failure
                shards.extend(
                    executor.map(
                        lambda s: _attach_iterator(client, stream_arn, s),
                        open_shards,
                    )
                )
            except StreamServiceError as exc:
                raise ShardDiscoveryError(
                    f"Failed to discover shards of {stream_arn}: {exc}",
                    stream_arn=stream_arn,
                ) from exc

            pages += 1
            last_evaluated_shard_id = description.get("LastEvaluatedShardId")
            if not last_evaluated_shard_id:
                break

    logger.info(
        "Discovered %d open shards across %d pages",
        len(shards),
        pages,
        extra={"stream_arn": stream_arn, "shard_ids": [s.shard_id for s in shards]},
    )
    return ShardDirectory(shards)


__all__ = ["ITERATOR_TYPE", "discover_open_shards", "is_open_shard"]
