"""
Root-level pytest configuration registering the test markers.

Unit tests run against mocked clients; integration tests run against moto.
"""

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests with mocked clients")
    config.addinivalue_line(
        "markers", "integration: tests against moto-backed AWS services"
    )


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep boto3 away from real credentials and subscriber env settings."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    for name in (
        "DYNAMO_SUBSCRIBER_STREAM_ARN",
        "DYNAMO_SUBSCRIBER_TABLE_NAME",
        "DYNAMO_SUBSCRIBER_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
