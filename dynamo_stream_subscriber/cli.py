"""
Print DynamoDB stream records as JSON lines.

Usage:
    # Subscribe by table name
    dynamo-stream-subscriber --table orders --region us-east-1

    # Subscribe to a stream ARN against DynamoDB Local
    dynamo-stream-subscriber --stream-arn arn:aws:dynamodb:... \
        --endpoint-url http://localhost:8000 --interval 2
"""

import argparse
import json
import logging
import sys
import threading
from typing import Optional, Sequence

from pydantic import ValidationError

from dynamo_stream_subscriber.models import SubscriberState
from dynamo_stream_subscriber.subscriber import DynamoDBStreamSubscriber
from dynamo_stream_subscriber.types import DynamoDBStreamRecord

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Subscribe to a DynamoDB stream and print its records",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--stream-arn", help="ARN of the stream")
    target.add_argument("--table", help="Table whose stream is resolved")
    parser.add_argument(
        "--interval",
        type=float,
        default=10.0,
        help="Seconds between poll cycles (default: 10)",
    )
    parser.add_argument("--region", default=None, help="AWS region override")
    parser.add_argument(
        "--endpoint-url",
        default=None,
        help="Custom endpoint, e.g. DynamoDB Local",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def format_record(
    record: DynamoDBStreamRecord, key: Optional[dict[str, object]]
) -> str:
    """Serialize a record and its key as one JSON line."""
    return json.dumps({"key": key, "record": record}, default=str)


def wait_for_interrupt() -> None:
    """Block the calling thread until interrupted."""
    threading.Event().wait()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        subscriber = DynamoDBStreamSubscriber(
            stream_arn=args.stream_arn,
            table_name=args.table,
            interval=args.interval,
            region=args.region,
            endpoint_url=args.endpoint_url,
        )
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    @subscriber.on_record
    def _print(record: DynamoDBStreamRecord, key: Optional[dict[str, object]]) -> None:
        print(format_record(record, key), flush=True)

    @subscriber.on_error
    def _log(error: BaseException) -> None:
        logger.error("Stream error: %s", error)

    subscriber.start()
    if subscriber.state == SubscriberState.FAILED:
        return 1

    try:
        wait_for_interrupt()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping subscriber")
    finally:
        subscriber.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
