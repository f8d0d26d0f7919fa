"""Custom exceptions for dynamo_stream_subscriber operations."""

from typing import Optional


class StreamSubscriberError(Exception):
    """Base exception for all dynamo_stream_subscriber errors."""


# DynamoDB Streams specific exceptions
class StreamServiceError(StreamSubscriberError):
    """Base exception for failed DynamoDB Streams calls."""


class StreamRetryableError(StreamServiceError):
    """
    Exception raised for retryable errors in DynamoDB Streams calls.

    Raised when a call fails due to a temporary issue such as throttling,
    which could succeed on a later poll cycle.
    """


class StreamCriticalError(StreamServiceError):
    """
    Exception raised for critical errors in DynamoDB Streams calls.

    Raised when a call fails due to a permanent issue such as a missing
    stream or denied access, which will not succeed without intervention.
    """


class StreamThroughputError(StreamRetryableError):
    """Raised when DynamoDB Streams request limits are exceeded."""


class StreamServerError(StreamRetryableError):
    """Raised when DynamoDB Streams has an internal server error."""


class StreamAccessError(StreamCriticalError):
    """Raised when access to the stream is denied."""


class StreamResourceNotFoundError(StreamCriticalError):
    """Raised when the stream, shard or table does not exist."""


class StreamValidationError(StreamCriticalError):
    """Raised when DynamoDB Streams request validation fails."""


class ExpiredIteratorError(StreamCriticalError):
    """Raised when a shard iterator is used after it expired."""


class TrimmedDataAccessError(StreamCriticalError):
    """Raised when a shard iterator points past the retention window."""


# Subscriber lifecycle exceptions
class StreamResolutionError(StreamSubscriberError):
    """Raised when no stream ARN can be found for a table."""

    def __init__(self, message: str, table_name: Optional[str] = None):
        super().__init__(message)
        self.table_name = table_name


class ShardDiscoveryError(StreamSubscriberError):
    """Raised when listing shards or fetching a shard iterator fails."""

    def __init__(self, message: str, stream_arn: Optional[str] = None):
        super().__init__(message)
        self.stream_arn = stream_arn


class ShardReadError(StreamSubscriberError):
    """Raised when reading records from a shard fails."""

    def __init__(self, message: str, shard_id: Optional[str] = None):
        super().__init__(message)
        self.shard_id = shard_id


CURSOR_INVALIDATING_ERRORS = (ExpiredIteratorError, TrimmedDataAccessError)
