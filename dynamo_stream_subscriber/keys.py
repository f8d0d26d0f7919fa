"""Decoding of stream record key attributes into plain Python values."""

from typing import Optional

from boto3.dynamodb.types import TypeDeserializer

from dynamo_stream_subscriber.types import DynamoDBStreamRecord, KeyAttributes

_deserializer = TypeDeserializer()


def extract_key(keys: Optional[KeyAttributes]) -> Optional[dict[str, object]]:
    """
    Convert attribute-value encoded key attributes to a plain dict.

    Returns None when the record carries no key attributes. Numbers decode
    to ``Decimal`` and binary values to ``boto3.dynamodb.types.Binary``.
    """
    if not keys:
        return None
    return {name: _deserializer.deserialize(value) for name, value in keys.items()}


def extract_record_key(
    record: DynamoDBStreamRecord,
) -> Optional[dict[str, object]]:
    """Extract the primary key of a stream record, if it has one."""
    return extract_key(record.get("dynamodb", {}).get("Keys"))


__all__ = ["extract_key", "extract_record_key"]
