"""Resolution of a table name to the ARN of its change stream."""

import logging

from dynamo_stream_subscriber.shared_exceptions import (
    StreamResolutionError,
    StreamServiceError,
)
from dynamo_stream_subscriber.streams_client import StreamsClient

logger = logging.getLogger(__name__)


def resolve_stream_arn(client: StreamsClient, table_name: str) -> str:
    """
    Find the stream ARN for a table.

    The table's own metadata is tried first; when it yields nothing the
    stream listing is consulted. A listing failure, or no ARN from either
    lookup, raises StreamResolutionError.
    """
    stream_arn = client.describe_table_stream_arn(table_name)
    if stream_arn:
        logger.info(
            "Resolved stream for table %s from describe_table: %s",
            table_name,
            stream_arn,
        )
        return stream_arn

    try:
        stream_arn = client.list_stream_arn(table_name)
    except StreamServiceError as exc:
        raise StreamResolutionError(
            f"Cannot retrieve the stream arn of {table_name}: {exc}",
            table_name=table_name,
        ) from exc

    if not stream_arn:
        raise StreamResolutionError(
            f"Cannot retrieve the stream arn of {table_name}: "
            "no stream is enabled on the table",
            table_name=table_name,
        )

    logger.info(
        "Resolved stream for table %s from list_streams: %s",
        table_name,
        stream_arn,
    )
    return stream_arn


__all__ = ["resolve_stream_arn"]
