"""
Test data for Lambda tests that do not need AWS.

- DataFactory: SQS records/events and typed test messages, including
  deliberately malformed payloads for negative tests
- MockAwsServices: a Lambda context object and canned client responses
- EventValidators: structural checks on records and handler responses
"""
import copy
import json
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional


TEST_QUEUE_ARN = 'arn:aws:sqs:us-east-1:123456789012:test-queue'


def _now_ms() -> int:
    return int(time.time() * 1000)


def _random_suffix(length: int = 9) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sqs_attributes() -> Dict[str, str]:
    now = str(_now_ms())
    return {
        'ApproximateReceiveCount': '1',
        'SentTimestamp': now,
        'ApproximateFirstReceiveTimestamp': now,
        'SenderId': 'test-sender-id',
    }


# ==============================================================================
# Test Data Factory
# ==============================================================================

class DataFactory:
    """Builders for Lambda event payloads and message bodies."""

    @staticmethod
    def create_lambda_record() -> Dict[str, Any]:
        """A record with a fixed key1/key2/key3 body, as sent to the direct-invoke function."""
        return {
            'message': f"msg-{_now_ms()}-{_random_suffix()}",
            'body': json.dumps({'key1': 'value1', 'key2': 'value2', 'key3': 'value3'}),
            'attributes': _sqs_attributes(),
            'messageAttributes': {},
            'md5OfBody': 'test-md5-hash',
            'eventSource': 'aws:sqs',
            'eventSourceARN': TEST_QUEUE_ARN,
            'awsRegion': 'us-east-1',
        }

    @staticmethod
    def create_sqs_record(**overrides) -> Dict[str, Any]:
        """
        A single SQS record as Lambda receives it in event['Records'].

        Args:
            **overrides: Top-level record fields to replace (e.g. body=...)
        """
        now = _now_ms()
        record = {
            'messageId': f"msg-{now}-{_random_suffix()}",
            'receiptHandle': f"receipt-{now}",
            'body': json.dumps({'test': 'data', 'timestamp': _iso_now()}),
            'attributes': _sqs_attributes(),
            'messageAttributes': {},
            'md5OfBody': 'test-md5-hash',
            'eventSource': 'aws:sqs',
            'eventSourceARN': TEST_QUEUE_ARN,
            'awsRegion': 'us-east-1',
        }
        record.update(overrides)
        return record

    @classmethod
    def create_sqs_event(cls, record_count: int = 1, **record_overrides) -> Dict[str, Any]:
        """An SQS event with record_count records sharing the same overrides."""
        return {'Records': [cls.create_sqs_record(**record_overrides) for _ in range(record_count)]}

    @staticmethod
    def create_test_message(message_type: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        A typed message body.

        Args:
            message_type: 'user_event', 'order_event' or 'notification'; any
                other type gets the base fields merged with data
            data: Field values overriding the defaults

        Returns:
            Message dict with id, timestamp and type plus type-specific fields
        """
        data = data or {}
        message = {
            'id': f"{message_type}-{_now_ms()}",
            'timestamp': _iso_now(),
            'type': message_type,
        }

        if message_type == 'user_event':
            message.update({
                'userId': data.get('userId', '12345'),
                'action': data.get('action', 'created'),
                'metadata': data.get('metadata', {}),
            })
        elif message_type == 'order_event':
            message.update({
                'orderId': data.get('orderId', 'order-123'),
                'customerId': data.get('customerId', 'customer-456'),
                'amount': data.get('amount', 100.00),
                'status': data.get('status', 'pending'),
            })
        elif message_type == 'notification':
            message.update({
                'recipient': data.get('recipient', 'user@example.com'),
                'subject': data.get('subject', 'Test Notification'),
                'body': data.get('body', 'This is a test notification'),
                'priority': data.get('priority', 'normal'),
            })
        else:
            message.update(data)
        return message

    @staticmethod
    def create_invalid_message(error_type: str) -> str:
        """
        A message body the function under test should reject.

        The harness never validates these; they are sent verbatim.
        """
        if error_type == 'malformed_json':
            return 'invalid json { missing bracket'
        elif error_type == 'missing_required_fields':
            return json.dumps({'id': 'missing-fields'})
        elif error_type == 'invalid_type':
            return json.dumps({'type': 'unknown_type', 'data': {}})
        return 'unknown error type'


# ==============================================================================
# Mock AWS Services
# ==============================================================================

class LambdaContext:
    """Stand-in for the context object Lambda passes to a handler."""

    def __init__(self, **overrides):
        now = _now_ms()
        self.function_name = 'test-function'
        self.function_version = '$LATEST'
        self.invoked_function_arn = 'arn:aws:lambda:us-east-1:123456789012:function:test-function'
        self.memory_limit_in_mb = 128
        self.aws_request_id = f"request-{now}"
        self.log_group_name = '/aws/lambda/test-function'
        self.log_stream_name = f"2023/01/01/[$LATEST]{now}"
        self._remaining_time_ms = 30000
        for key, value in overrides.items():
            setattr(self, key, value)

    def get_remaining_time_in_millis(self) -> int:
        return self._remaining_time_ms


class MockAwsServices:

    @staticmethod
    def create_lambda_context(**overrides) -> LambdaContext:
        return LambdaContext(**overrides)

    _SQS_RESPONSES = {
        'send_message': {
            'MessageId': 'mock-message-id',
            'MD5OfMessageBody': 'mock-md5-hash',
        },
        'receive_message': {
            'Messages': [
                {
                    'MessageId': 'mock-received-id',
                    'ReceiptHandle': 'mock-receipt-handle',
                    'Body': json.dumps({'test': 'received message'}),
                    'Attributes': {},
                },
            ],
        },
        'delete_message': {},
    }

    _LAMBDA_RESPONSES = {
        'invoke': {
            'StatusCode': 200,
            'Payload': json.dumps({'statusCode': 200, 'body': 'Success'}),
        },
    }

    @classmethod
    def sqs_responses(cls) -> Dict[str, Any]:
        """Canned SQS client responses by operation name; a fresh copy per call."""
        return copy.deepcopy(cls._SQS_RESPONSES)

    @classmethod
    def lambda_responses(cls) -> Dict[str, Any]:
        return copy.deepcopy(cls._LAMBDA_RESPONSES)


# ==============================================================================
# Validators
# ==============================================================================

class EventValidators:

    SQS_RECORD_FIELDS = ('messageId', 'receiptHandle', 'body', 'eventSource')

    @classmethod
    def validate_sqs_message(cls, message: Dict[str, Any]) -> bool:
        """True if message has every field Lambda includes in an SQS record."""
        return all(field in message for field in cls.SQS_RECORD_FIELDS)

    @staticmethod
    def validate_lambda_response(response: Dict[str, Any]) -> bool:
        """True if response carries an integer statusCode."""
        status_code = response.get('statusCode')
        return isinstance(status_code, int) and not isinstance(status_code, bool)

    @staticmethod
    def validate_processing_time(start_ms: int, end_ms: int, max_ms: int) -> bool:
        return end_ms - start_ms <= max_ms
