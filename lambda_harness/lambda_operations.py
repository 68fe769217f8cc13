"""
Direct Lambda invocation.
"""
import base64
import json
from typing import Any

from lambda_harness.errors import transport_errors
from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.models import InvocationResult


def decode_payload(raw: bytes) -> Any:
    """
    Decode an invoke response payload.

    JSON payloads are parsed; anything else is returned as text, and an
    empty payload as None.
    """
    if not raw:
        return None
    text = raw.decode('utf-8')
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class LambdaOperations:
    """Synchronous (RequestResponse) invocation of the function under test."""

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('lambda')

    def invoke(self, function_name: str, payload: Any, include_logs: bool = False) -> InvocationResult:
        """
        Invoke a Lambda function and wait for its response.

        Args:
            function_name: Function name or ARN
            payload: JSON-serializable event
            include_logs: Request the last 4 KB of the execution log

        Returns:
            InvocationResult with the decoded response payload
        """
        kwargs = {
            'FunctionName': function_name,
            'Payload': json.dumps(payload).encode('utf-8'),
        }
        if include_logs:
            kwargs['LogType'] = 'Tail'

        with transport_errors('lambda.invoke'):
            response = self.client.invoke(**kwargs)
            body = response['Payload'].read() if response.get('Payload') is not None else b''

        log_result = response.get('LogResult')
        if log_result:
            log_result = base64.b64decode(log_result).decode('utf-8', errors='replace')

        result = InvocationResult(
            status_code=response.get('StatusCode'),
            payload=decode_payload(body),
            log_result=log_result,
            function_error=response.get('FunctionError'),
            executed_version=response.get('ExecutedVersion'),
        )
        print(f"Invoked {function_name}: status={result.status_code} error={result.function_error}")
        return result
