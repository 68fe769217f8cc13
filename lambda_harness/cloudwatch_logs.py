"""
CloudWatch Logs queries for asserting on Lambda output.

get_log_events() polls filter_log_events with a window that grows on every
attempt, from a fixed start time up to "now", until at least one event
matches. When nothing matches before the deadline it returns an empty list
by default; callers assert on emptiness.
"""
from typing import List, Optional

from lambda_harness.errors import TransportError, transport_errors
from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.logging_utils import log_poll_outcome
from lambda_harness.models import LogEvent, LogFilter
from lambda_harness.polling import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_TIMEOUT_MS,
    TimeoutPolicy,
    epoch_ms,
    poll_until
)


def lambda_log_group(function_name: str) -> str:
    """Log group Lambda writes to for function_name."""
    return f"/aws/lambda/{function_name}"


class CloudWatchLogsHelper:

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('logs')

    def filter_events(self, log_group_name: str, filter_pattern: str, start_time: int, end_time: int) -> List[LogEvent]:
        """
        One query for events matching filter_pattern in [start_time, end_time].

        All result pages are read. A log group that does not exist yet
        (Lambda creates it on first execution) yields no events.
        """
        kwargs = {
            'logGroupName': log_group_name,
            'startTime': start_time,
            'endTime': end_time,
        }
        if filter_pattern:
            kwargs['filterPattern'] = filter_pattern

        events: List[LogEvent] = []
        try:
            with transport_errors('logs.filter_log_events'):
                paginator = self.client.get_paginator('filter_log_events')
                for page in paginator.paginate(**kwargs):
                    events.extend(LogEvent.from_response(event) for event in page.get('events', []))
        except TransportError as e:
            if e.code == 'ResourceNotFoundException':
                return []
            raise
        return events

    def get_log_events(
        self,
        lambda_function: str,
        log_filter: LogFilter,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        on_timeout: TimeoutPolicy = TimeoutPolicy.RETURN,
        log_group_name: Optional[str] = None
    ) -> List[LogEvent]:
        """
        Wait for log events from a Lambda function that match a filter.

        Args:
            lambda_function: Function whose /aws/lambda/<name> group is queried
            log_filter: Filter pattern and inclusive start time (epoch ms)
            timeout_ms: Budget measured from this call
            interval_ms: Sleep between empty queries
            on_timeout: RETURN (default) gives [] on timeout, RAISE raises
            log_group_name: Query this group instead of the function's

        Returns:
            Matching events, or [] if none appeared before the deadline

        Raises:
            PollTimeoutError: Only with on_timeout=TimeoutPolicy.RAISE
            TransportError: A query failed for a reason other than a missing group
        """
        group = log_group_name or lambda_log_group(lambda_function)
        description = f"log events matching {log_filter.filter_pattern!r} in {group}"

        outcome = poll_until(
            lambda: self.filter_events(group, log_filter.filter_pattern, log_filter.start_time, epoch_ms()),
            lambda events: len(events) > 0,
            description,
            expected='at least 1 event',
            timeout_ms=timeout_ms,
            interval_ms=interval_ms,
            on_timeout=on_timeout,
            observe=len,
        )
        log_poll_outcome(description, outcome.satisfied, outcome.elapsed_ms, outcome.attempts)
        return outcome.value if outcome.satisfied else []
