"""
Configuration for dynamo_stream_subscriber package.

Uses pydantic-settings for environment variable management.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERVAL = timedelta(seconds=10)


class SubscriberConfig(BaseSettings):
    """Configuration for a DynamoDB stream subscriber."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMO_SUBSCRIBER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Stream target, exactly one of these
    stream_arn: Optional[str] = Field(
        default=None,
        description="ARN of the DynamoDB stream to subscribe to",
    )
    table_name: Optional[str] = Field(
        default=None,
        description="Table whose latest stream is resolved at start",
    )

    # Polling
    interval: timedelta = Field(
        default=DEFAULT_INTERVAL,
        description=(
            "Time between poll cycles, as seconds (e.g. 10 or 2.5) or an "
            "ISO 8601 duration (e.g. PT10S); unit strings like \"10s\" are "
            "not accepted"
        ),
    )
    max_records_per_shard: Optional[int] = Field(
        default=None,
        description="Limit passed to get_records for each shard",
        ge=1,
        le=1000,
    )
    shard_page_size: Optional[int] = Field(
        default=None,
        description="Limit passed to describe_stream for each page",
        ge=1,
        le=100,
    )
    max_workers: int = Field(
        default=8,
        description="Threads used for concurrent shard calls",
        ge=1,
        le=64,
    )

    # AWS connection
    region: Optional[str] = Field(
        default=None,
        description="AWS region for DynamoDB and DynamoDB Streams",
    )
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Override endpoint URL (DynamoDB Local, moto server)",
    )

    @field_validator("interval")
    @classmethod
    def _positive_interval(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("interval must be greater than zero")
        return value

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "SubscriberConfig":
        if bool(self.stream_arn) == bool(self.table_name):
            raise ValueError("exactly one of stream_arn or table_name is required")
        return self

    @property
    def interval_seconds(self) -> float:
        """Polling interval as seconds."""
        return self.interval.total_seconds()


@lru_cache
def get_config() -> SubscriberConfig:
    """Get cached configuration instance."""
    return SubscriberConfig()
