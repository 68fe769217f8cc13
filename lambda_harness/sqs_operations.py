"""
SQS operations for queue-triggered Lambda tests.
Sending stimuli, purging the queue, and waiting for the consumer to drain it.
"""
from typing import Any, Dict, List, Optional

from lambda_harness.errors import TransportError, transport_errors
from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.logging_utils import log_cleanup_failure, log_poll_outcome
from lambda_harness.models import SqsMessage
from lambda_harness.polling import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_TIMEOUT_MS,
    PollOutcome,
    TimeoutPolicy,
    poll_until
)


# Gives the event source mapping time to pick up new messages before the first check
DEFAULT_INITIAL_DELAY_MS = 10000
MAX_RECEIVE_BATCH = 10


class SqsOperations:
    """SQS calls used by the harness, bound to one client."""

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('sqs')

    def send_message(self, queue_url: str, message: SqsMessage) -> str:
        """
        Send a single message.

        The body is sent verbatim, so malformed payloads can be used for
        negative tests.

        Args:
            queue_url: Target queue URL
            message: Message to send

        Returns:
            SQS MessageId
        """
        kwargs: Dict[str, Any] = {'QueueUrl': queue_url, 'MessageBody': message.body}
        if message.message_attributes:
            kwargs['MessageAttributes'] = message.message_attributes

        with transport_errors('sqs.send_message'):
            response = self.client.send_message(**kwargs)
        return response.get('MessageId', '')

    def send_messages(self, queue_url: str, messages: List[SqsMessage]) -> List[str]:
        """Send messages one call at a time, in order. Returns their ids."""
        return [self.send_message(queue_url, message) for message in messages]

    def receive_messages(
        self,
        queue_url: str,
        max_messages: int = MAX_RECEIVE_BATCH,
        wait_time_seconds: int = 1,
        visibility_timeout: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Short-poll read of up to max_messages messages.

        Args:
            queue_url: Queue URL
            max_messages: Batch size (1-10)
            wait_time_seconds: Long-poll wait; 0 returns immediately
            visibility_timeout: Override the queue's visibility timeout for
                the received messages; 0 leaves them visible to other consumers

        Returns:
            Raw SQS message dicts (empty list when none)
        """
        kwargs: Dict[str, Any] = {
            'QueueUrl': queue_url,
            'MaxNumberOfMessages': max_messages,
            'WaitTimeSeconds': wait_time_seconds,
        }
        if visibility_timeout is not None:
            kwargs['VisibilityTimeout'] = visibility_timeout

        with transport_errors('sqs.receive_message'):
            response = self.client.receive_message(**kwargs)
        return response.get('Messages', [])

    def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        with transport_errors('sqs.delete_message'):
            self.client.delete_message(QueueUrl=queue_url, ReceiptHandle=receipt_handle)

    def get_queue_depth(self, queue_url: str) -> int:
        """Approximate number of visible messages, as reported by SQS."""
        with transport_errors('sqs.get_queue_attributes'):
            response = self.client.get_queue_attributes(
                QueueUrl=queue_url,
                AttributeNames=['ApproximateNumberOfMessages']
            )
        return int(response.get('Attributes', {}).get('ApproximateNumberOfMessages', 0))

    def purge_queue(self, queue_url: str, wait_time_seconds: int = 0) -> int:
        """
        Drain the queue by reading and deleting until a read comes back empty.

        Unlike SQS PurgeQueue this has no 60-second cooldown, so it can run
        before every test. Best-effort: a failed call is logged and the purge
        stops.

        Args:
            queue_url: Queue URL
            wait_time_seconds: Wait used for each read; 0 returns at once on an empty queue

        Returns:
            Number of messages deleted
        """
        deleted = 0
        try:
            messages = self.receive_messages(queue_url, wait_time_seconds=wait_time_seconds)
            while messages:
                for message in messages:
                    self.delete_message(queue_url, message['ReceiptHandle'])
                    deleted += 1
                messages = self.receive_messages(queue_url, wait_time_seconds=wait_time_seconds)
        except TransportError as e:
            log_cleanup_failure('purge_queue', e)

        if deleted:
            print(f"Purged {deleted} message(s) from {queue_url}")
        return deleted

    def wait_for_lambda_processing(
        self,
        queue_url: str,
        expected_message_count: int = 0,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        wait_time_seconds: int = 1,
        on_timeout: TimeoutPolicy = TimeoutPolicy.RAISE
    ) -> PollOutcome:
        """
        Block until the queue holds expected_message_count visible messages.

        Each attempt receives a batch with a zero visibility timeout, so the
        peek does not hide messages from the Lambda consumer. A batch of any
        other size just means "not yet". One receive returns at most
        MAX_RECEIVE_BATCH messages, so for larger expected counts the
        approximate queue depth is compared instead.

        Args:
            queue_url: Queue consumed by the Lambda under test
            expected_message_count: Count that ends the wait (usually 0)
            timeout_ms: Budget measured from this call, including the initial delay
            initial_delay_ms: Sleep before the first check
            interval_ms: Sleep between checks
            wait_time_seconds: Long-poll wait of each read
            on_timeout: RAISE (default) or RETURN an unsatisfied outcome

        Returns:
            PollOutcome whose value is the last observed count

        Raises:
            PollTimeoutError: Count never matched within timeout_ms
            TransportError: A receive call failed
        """
        description = f"Lambda processing of {queue_url}"

        def observed_count() -> int:
            # A full batch cannot tell 10 visible messages from 11
            if expected_message_count >= MAX_RECEIVE_BATCH:
                return self.get_queue_depth(queue_url)
            return len(self.receive_messages(
                queue_url,
                wait_time_seconds=wait_time_seconds,
                visibility_timeout=0
            ))

        outcome = poll_until(
            observed_count,
            lambda count: count == expected_message_count,
            description,
            expected=expected_message_count,
            timeout_ms=timeout_ms,
            interval_ms=interval_ms,
            initial_delay_ms=initial_delay_ms,
            on_timeout=on_timeout,
        )
        log_poll_outcome(description, outcome.satisfied, outcome.elapsed_ms, outcome.attempts)
        return outcome
