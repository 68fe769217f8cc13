"""
Exception types raised by the harness.

Only two negative outcomes are expected during a test run: a queue that never
drains (PollTimeoutError) and a log query that never matches (an empty list,
not an exception). Anything else coming back from AWS is a TransportError.
"""
from contextlib import contextmanager
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError


class HarnessError(Exception):
    """Base class for every error raised by lambda_harness."""


class TransportError(HarnessError):
    """
    A remote call failed (network, auth, throttling, missing resource).

    The poll loops never retry these; they surface to the caller as-is.
    """

    def __init__(self, operation: str, message: str, code: Optional[str] = None):
        self.operation = operation
        self.code = code
        super().__init__(f"{operation} failed: {message}")


class PollTimeoutError(HarnessError):
    """A poll condition was not satisfied before its deadline."""

    def __init__(
        self,
        description: str,
        expected: Any,
        observed: Any,
        elapsed_ms: int,
        timeout_ms: int
    ):
        self.description = description
        self.expected = expected
        self.observed = observed
        self.elapsed_ms = elapsed_ms
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timeout waiting for {description}. "
            f"Expected {expected}, last observed {observed} "
            f"after {elapsed_ms}ms (timeout {timeout_ms}ms)"
        )


class UnsupportedFileTypeError(HarnessError):
    """parse_file() was given an extension it has no parser for."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension}")


def error_code(error: Exception) -> Optional[str]:
    """Return the AWS error code of a ClientError, or None."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code')
    return None


@contextmanager
def transport_errors(operation: str):
    """
    Re-raise botocore failures inside the block as TransportError.

    Args:
        operation: Short name of the remote call, e.g. 'sqs.receive_message'
    """
    try:
        yield
    except ClientError as e:
        message = e.response.get('Error', {}).get('Message', str(e))
        raise TransportError(operation, message, error_code(e)) from e
    except BotoCoreError as e:
        raise TransportError(operation, str(e)) from e
