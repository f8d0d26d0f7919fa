"""
Thin wrapper around the boto3 DynamoDB Streams and DynamoDB clients.

Every call is a single request/response; the wrapper keeps no state besides
the boto3 clients themselves. botocore errors are translated into the
exceptions in ``shared_exceptions`` so callers only handle one hierarchy.
"""

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar, cast

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from dynamo_stream_subscriber.shared_exceptions import (
    ExpiredIteratorError,
    StreamAccessError,
    StreamResourceNotFoundError,
    StreamServerError,
    StreamServiceError,
    StreamThroughputError,
    StreamValidationError,
    TrimmedDataAccessError,
)
from dynamo_stream_subscriber.types import (
    DescribeStreamResponse,
    GetRecordsResponse,
    GetShardIteratorResponse,
)

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBClient
    from mypy_boto3_dynamodbstreams import DynamoDBStreamsClient
else:
    # Runtime fallback
    DynamoDBClient = object
    DynamoDBStreamsClient = object

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_CODE_EXCEPTIONS: dict[str, type[StreamServiceError]] = {
    "LimitExceededException": StreamThroughputError,
    "ProvisionedThroughputExceededException": StreamThroughputError,
    "ThrottlingException": StreamThroughputError,
    "InternalServerError": StreamServerError,
    "ServiceUnavailable": StreamServerError,
    "AccessDeniedException": StreamAccessError,
    "ResourceNotFoundException": StreamResourceNotFoundError,
    "ValidationException": StreamValidationError,
    "ExpiredIteratorException": ExpiredIteratorError,
    "TrimmedDataAccessException": TrimmedDataAccessError,
}


def handle_stream_errors(operation_name: str):
    """
    Decorator to translate botocore errors consistently across all calls.

    Args:
        operation_name: Name of the operation for error context
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
            try:
                return func(self, *args, **kwargs)
            except ClientError as e:
                error = e.response.get("Error", {})
                code = error.get("Code", "")
                message = error.get("Message", str(e))
                exc_class = ERROR_CODE_EXCEPTIONS.get(code, StreamServiceError)
                raise exc_class(
                    f"{operation_name} failed ({code or 'Unknown'}): {message}"
                ) from e
            except BotoCoreError as e:
                raise StreamServiceError(f"{operation_name} failed: {e}") from e

        return wrapper

    return decorator


class StreamsClient:
    """A class used to call DynamoDB Streams on behalf of a subscriber."""

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        streams_client: Optional[DynamoDBStreamsClient] = None,
        dynamodb_client: Optional[DynamoDBClient] = None,
    ):
        """Initializes a StreamsClient instance.

        Args:
            region (str, optional): AWS region passed through to boto3.
            endpoint_url (str, optional): Custom endpoint passed through to
                boto3, used for DynamoDB Local or moto server.
            streams_client: Pre-built dynamodbstreams client.
            dynamodb_client: Pre-built dynamodb client, only needed to
                resolve a table name to its stream.
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self._streams = streams_client
        self._dynamodb = dynamodb_client

    def _client_kwargs(self) -> dict[str, str]:
        kwargs: dict[str, str] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs

    @property
    def streams(self) -> DynamoDBStreamsClient:
        """Lazily built boto3 dynamodbstreams client."""
        if self._streams is None:
            self._streams = boto3.client(
                "dynamodbstreams", **self._client_kwargs()
            )
        return self._streams

    @property
    def dynamodb(self) -> DynamoDBClient:
        """Lazily built boto3 dynamodb client."""
        if self._dynamodb is None:
            self._dynamodb = boto3.client("dynamodb", **self._client_kwargs())
        return self._dynamodb

    @handle_stream_errors("describe_stream")
    def describe_stream(
        self,
        stream_arn: str,
        exclusive_start_shard_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> DescribeStreamResponse:
        """Fetch one page of the stream's shard list."""
        params: dict[str, Any] = {"StreamArn": stream_arn}
        if exclusive_start_shard_id:
            params["ExclusiveStartShardId"] = exclusive_start_shard_id
        if limit:
            params["Limit"] = limit

        logger.debug(
            "describe_stream (start) StreamArn: %s, ExclusiveStartShardId: %s",
            stream_arn,
            exclusive_start_shard_id,
        )
        return cast(DescribeStreamResponse, self.streams.describe_stream(**params))

    @handle_stream_errors("get_shard_iterator")
    def get_shard_iterator(
        self,
        stream_arn: str,
        shard_id: str,
        iterator_type: str = "LATEST",
    ) -> GetShardIteratorResponse:
        """Obtain a read cursor for a shard."""
        logger.debug("get_shard_iterator (start) ShardId: %s", shard_id)
        response = self.streams.get_shard_iterator(
            StreamArn=stream_arn,
            ShardId=shard_id,
            ShardIteratorType=iterator_type,
        )
        logger.debug(
            "get_shard_iterator (end) ShardId: %s, has iterator: %s",
            shard_id,
            bool(response.get("ShardIterator")),
        )
        return cast(GetShardIteratorResponse, response)

    @handle_stream_errors("get_records")
    def get_records(
        self, shard_iterator: str, limit: Optional[int] = None
    ) -> GetRecordsResponse:
        """Read the next batch of records at a shard iterator."""
        params: dict[str, Any] = {"ShardIterator": shard_iterator}
        if limit:
            params["Limit"] = limit
        return cast(GetRecordsResponse, self.streams.get_records(**params))

    def describe_table_stream_arn(self, table_name: str) -> Optional[str]:
        """
        Look up the table's latest stream ARN via describe_table.

        Best effort: any failure is logged and reported as None so the caller
        can fall back to list_streams.
        """
        try:
            table = self.dynamodb.describe_table(TableName=table_name)
        except (ClientError, BotoCoreError) as exc:
            logger.warning(
                "describe_table failed for %s, falling back to list_streams: %s",
                table_name,
                exc,
            )
            return None
        return table.get("Table", {}).get("LatestStreamArn")

    @handle_stream_errors("list_streams")
    def list_stream_arn(self, table_name: str) -> Optional[str]:
        """Return the first stream ARN listed for the table, if any."""
        response = self.streams.list_streams(TableName=table_name)
        streams = response.get("Streams") or []
        if not streams:
            return None
        return streams[0].get("StreamArn")


__all__ = [
    "ERROR_CODE_EXCEPTIONS",
    "StreamsClient",
    "handle_stream_errors",
]
