"""
DynamoDB operations for asserting on records written by the Lambda under test.

Uses the low-level client, so items go over the wire in attribute-value form
({'S': ...}, {'N': ...}, ...). to_dynamo_format() / from_dynamo_format()
convert between that form and plain Python values.
"""
from typing import Any, Dict, List, Optional

from lambda_harness.errors import transport_errors
from lambda_harness.harness_config import AwsClientConfig


def to_attribute_value(value: Any) -> Dict[str, Any]:
    """
    Encode one Python value as a DynamoDB attribute value.

    Raises:
        TypeError: value has no DynamoDB representation here
    """
    # bool before numbers: bool is an int subclass
    if isinstance(value, bool):
        return {'BOOL': value}
    if isinstance(value, str):
        return {'S': value}
    if isinstance(value, (int, float)):
        return {'N': str(value)}
    if value is None:
        return {'NULL': True}
    if isinstance(value, (list, tuple)):
        return {'L': [to_attribute_value(v) for v in value]}
    if isinstance(value, dict):
        return {'M': to_dynamo_format(value)}
    raise TypeError(f"Cannot encode {type(value).__name__} as a DynamoDB attribute")


def to_dynamo_format(data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Convert a plain dict to a DynamoDB item (attribute name -> attribute value)."""
    return {key: to_attribute_value(value) for key, value in data.items()}


def _decode_number(text: str):
    try:
        return int(text)
    except ValueError:
        return float(text)


def from_attribute_value(attribute: Dict[str, Any]) -> Any:
    """
    Decode one DynamoDB attribute value.

    Raises:
        TypeError: attribute does not carry exactly one known tag
    """
    if len(attribute) != 1:
        raise TypeError(f"Expected a single-tag attribute value, got {attribute!r}")
    tag, value = next(iter(attribute.items()))
    if tag == 'S':
        return value
    if tag == 'N':
        return _decode_number(value)
    if tag == 'BOOL':
        return value
    if tag == 'NULL':
        return None
    if tag == 'L':
        return [from_attribute_value(v) for v in value]
    if tag == 'M':
        return from_dynamo_format(value)
    raise TypeError(f"Unsupported DynamoDB attribute tag: {tag}")


def from_dynamo_format(item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Convert a DynamoDB item back to a plain dict."""
    return {key: from_attribute_value(value) for key, value in item.items()}


class DynamoDBTestHelper:
    """Thin wrapper over put/get/query/scan on a table under test."""

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('dynamodb')

    def put_item(self, table_name: str, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Write an item.

        Args:
            table_name: Table name
            item: Item already in attribute-value form (see to_dynamo_format)

        Returns:
            Raw put_item response
        """
        with transport_errors('dynamodb.put_item'):
            return self.client.put_item(TableName=table_name, Item=item)

    def get_item(self, table_name: str, key: Dict[str, Any]) -> Dict[str, Any]:
        """Raw get_item response; the item, if any, is under 'Item'."""
        with transport_errors('dynamodb.get_item'):
            return self.client.get_item(TableName=table_name, Key=key)

    def get_record(self, table_name: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Fetch an item by plain-dict key and decode it.

        Returns:
            Decoded item, or None if no item has that key
        """
        response = self.get_item(table_name, to_dynamo_format(key))
        item = response.get('Item')
        return from_dynamo_format(item) if item is not None else None

    def query(self, **params) -> Dict[str, Any]:
        """Raw query; params are passed through and must include TableName."""
        if 'TableName' not in params:
            raise ValueError("query() requires TableName")
        with transport_errors('dynamodb.query'):
            return self.client.query(**params)

    def scan(self, table_name: str) -> Dict[str, Any]:
        with transport_errors('dynamodb.scan'):
            return self.client.scan(TableName=table_name)

    def scan_records(self, table_name: str) -> List[Dict[str, Any]]:
        """All items in the table, decoded, following pagination."""
        records: List[Dict[str, Any]] = []
        with transport_errors('dynamodb.scan'):
            for page in self.client.get_paginator('scan').paginate(TableName=table_name):
                records.extend(from_dynamo_format(item) for item in page.get('Items', []))
        return records
