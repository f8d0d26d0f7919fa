"""Tests for SubscriberConfig validation and defaults."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from dynamo_stream_subscriber.config import SubscriberConfig, get_config

from .conftest import STREAM_ARN


@pytest.mark.unit
class TestSubscriberConfig:
    """Validation rules for subscriber configuration."""

    def test_defaults(self) -> None:
        config = SubscriberConfig(stream_arn=STREAM_ARN)

        assert config.interval == timedelta(seconds=10)
        assert config.interval_seconds == 10.0
        assert config.table_name is None
        assert config.region is None
        assert config.endpoint_url is None
        assert config.max_workers == 8

    def test_numeric_interval_is_seconds(self) -> None:
        config = SubscriberConfig(table_name="orders", interval=2.5)
        assert config.interval_seconds == 2.5

    def test_iso_duration_interval(self) -> None:
        config = SubscriberConfig(table_name="orders", interval="PT1M")
        assert config.interval == timedelta(minutes=1)

    def test_rejects_unit_suffixed_interval(self) -> None:
        with pytest.raises(ValidationError):
            SubscriberConfig(table_name="orders", interval="10s")

    def test_requires_a_target(self) -> None:
        with pytest.raises(ValidationError, match="exactly one"):
            SubscriberConfig()

    def test_rejects_both_targets(self) -> None:
        with pytest.raises(ValidationError, match="exactly one"):
            SubscriberConfig(stream_arn=STREAM_ARN, table_name="orders")

    @pytest.mark.parametrize("interval", [0, -5])
    def test_rejects_non_positive_interval(self, interval: int) -> None:
        with pytest.raises(ValidationError, match="greater than zero"):
            SubscriberConfig(stream_arn=STREAM_ARN, interval=interval)

    def test_rejects_out_of_range_record_limit(self) -> None:
        with pytest.raises(ValidationError):
            SubscriberConfig(stream_arn=STREAM_ARN, max_records_per_shard=5000)

    def test_is_frozen(self) -> None:
        config = SubscriberConfig(stream_arn=STREAM_ARN)
        with pytest.raises(ValidationError):
            config.region = "eu-west-1"  # type: ignore[misc]

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNAMO_SUBSCRIBER_TABLE_NAME", "orders")
        monkeypatch.setenv("DYNAMO_SUBSCRIBER_INTERVAL", "PT3S")
        monkeypatch.setenv("DYNAMO_SUBSCRIBER_REGION", "eu-west-1")

        config = SubscriberConfig()

        assert config.table_name == "orders"
        assert config.interval_seconds == 3.0
        assert config.region == "eu-west-1"


@pytest.mark.unit
def test_get_config_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DYNAMO_SUBSCRIBER_STREAM_ARN", STREAM_ARN)
    get_config.cache_clear()
    try:
        assert get_config() is get_config()
        assert get_config().stream_arn == STREAM_ARN
    finally:
        get_config.cache_clear()
