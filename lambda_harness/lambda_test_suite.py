"""
Reusable SQS-to-Lambda scenarios.

Every run purges the queue first, sends its messages, waits for the Lambda
to drain the queue and returns timings. Assertions are left to the calling
test.
"""
import concurrent.futures
import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from lambda_harness.harness_config import HarnessConfig
from lambda_harness.lambda_test_helper import LambdaTestHelper
from lambda_harness.models import (
    ErrorHandlingResult,
    LoadTestResult,
    ProcessingResult,
    SqsMessage
)
from lambda_harness.polling import Deadline, pause


# How long a malformed message is given to fail before the queue is inspected
DEFAULT_ERROR_SETTLE_MS = 5000


def partition(items: List[Any], group_count: int) -> List[List[Any]]:
    """Split items into at most group_count contiguous groups of equal size (last may be short)."""
    if group_count < 1:
        raise ValueError(f"group_count must be >= 1, got {group_count}")
    if not items:
        return []
    size = math.ceil(len(items) / group_count)
    return [items[i:i + size] for i in range(0, len(items), size)]


class LambdaTestSuite:
    """
    Scenarios against the queue in config.queue_url.

    Tests that share a queue must not run concurrently: the purge at the
    start of each run would race with the other test's messages.
    """

    def __init__(self, helper: LambdaTestHelper, config: HarnessConfig,
                 drain_options: Optional[Dict[str, Any]] = None):
        """
        Args:
            helper: Service wrappers to use
            config: Resource names and default timeout
            drain_options: Extra keyword arguments for every
                wait_for_lambda_processing() call (initial_delay_ms, ...)
        """
        self.helper = helper
        self.config = config
        self.drain_options = drain_options or {}

    def _wait_for_drain(self, timeout_ms: Optional[int] = None) -> None:
        options = {'timeout_ms': self.config.timeout_ms}
        options.update(self.drain_options)
        if timeout_ms is not None:
            options['timeout_ms'] = timeout_ms
        self.helper.sqs.wait_for_lambda_processing(self.config.queue_url, 0, **options)

    def run_single_message(self, message: SqsMessage,
                           expected_processing_time_ms: Optional[int] = None) -> ProcessingResult:
        """Send one message and wait until the Lambda has consumed it."""
        self.helper.sqs.purge_queue(self.config.queue_url)

        message_id = self.helper.sqs.send_message(self.config.queue_url, message)

        timer = Deadline(self.config.timeout_ms)
        self._wait_for_drain()
        return ProcessingResult([message_id], timer.elapsed_ms(), expected_processing_time_ms)

    def run_batch_messages(self, messages: List[SqsMessage],
                           expected_processing_time_ms: Optional[int] = None) -> ProcessingResult:
        """Send messages one after another, then wait for all of them to be consumed."""
        self.helper.sqs.purge_queue(self.config.queue_url)

        message_ids = self.helper.sqs.send_messages(self.config.queue_url, messages)

        timer = Deadline(self.config.timeout_ms)
        self._wait_for_drain()
        return ProcessingResult(message_ids, timer.elapsed_ms(), expected_processing_time_ms)

    def run_error_handling(self, invalid_message: SqsMessage, expect_dlq: bool = False,
                           settle_ms: int = DEFAULT_ERROR_SETTLE_MS) -> ErrorHandlingResult:
        """
        Send a message the Lambda is expected to reject.

        After settle_ms the queue is read once. With a redrive policy the
        message should have moved to the DLQ (0 remaining); without one it
        may still be waiting for a retry. The count is returned either way.

        Args:
            invalid_message: Payload sent verbatim
            expect_dlq: Only recorded in the log line; the caller asserts
            settle_ms: Wait before reading the queue
        """
        self.helper.sqs.purge_queue(self.config.queue_url)

        message_id = self.helper.sqs.send_message(self.config.queue_url, invalid_message)

        pause(settle_ms)
        remaining = self.helper.sqs.receive_messages(self.config.queue_url, visibility_timeout=0)
        print(f"Error handling: {len(remaining)} message(s) remain (expect_dlq={expect_dlq})")
        return ErrorHandlingResult(message_id, len(remaining))

    def run_load_performance(self, message_count: int, concurrency_level: int = 5,
                             timeout_ms: Optional[int] = None) -> LoadTestResult:
        """
        Send message_count messages in concurrency_level groups and time the drain.

        Each group is sent sequentially from its own worker thread; no
        ordering between groups is implied. Throughput covers sending plus
        the drain wait.
        """
        self.helper.sqs.purge_queue(self.config.queue_url)

        messages = [
            SqsMessage(body=json.dumps({'id': i, 'timestamp': datetime.now(timezone.utc).isoformat()}))
            for i in range(message_count)
        ]
        groups = partition(messages, concurrency_level)

        timer = Deadline(timeout_ms if timeout_ms is not None else self.config.timeout_ms)
        with concurrent.futures.ThreadPoolExecutor(max_workers=concurrency_level) as executor:
            futures = [
                executor.submit(self.helper.sqs.send_messages, self.config.queue_url, group)
                for group in groups
            ]
            for future in concurrent.futures.as_completed(futures):
                future.result()

        self._wait_for_drain(timeout_ms)

        total_ms = max(timer.elapsed_ms(), 1)
        result = LoadTestResult(
            message_count=message_count,
            total_time_ms=total_ms,
            throughput=message_count / (total_ms / 1000),
            average_time_per_message_ms=total_ms / message_count if message_count else 0.0,
        )
        print(f"Load run: {message_count} messages in {total_ms}ms ({result.throughput:.2f} msg/s)")
        return result
