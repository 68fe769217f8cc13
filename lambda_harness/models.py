"""
Plain-dataclass models for stimuli, expectations and results.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _default_upload_metadata() -> Dict[str, str]:
    return {'test-identifier': 'lambda-trigger-test'}


@dataclass
class SqsMessage:
    """A message to send to the queue under test."""
    body: str
    id: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    # SQS MessageAttributes wire form, e.g. {'k': {'DataType': 'String', 'StringValue': 'v'}}
    message_attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class S3UploadObject:
    """An object whose upload triggers the S3 Lambda."""
    filename: str
    filecontent: str
    content_type: str = 'text/plain'
    metadata: Dict[str, str] = field(default_factory=_default_upload_metadata)


@dataclass
class SnsMessage:
    """A notification to publish to the topic under test."""
    message: str
    subject: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LogFilter:
    """
    What the log poller looks for.

    start_time is an inclusive epoch-millisecond lower bound, usually taken
    a little before the stimulus is sent.
    """
    filter_pattern: str
    start_time: int


@dataclass
class LogEvent:
    """One CloudWatch Logs event returned by filter_log_events."""
    timestamp: int
    message: str
    log_stream_name: Optional[str] = None
    event_id: Optional[str] = None
    ingestion_time: Optional[int] = None

    @classmethod
    def from_response(cls, event: Dict[str, Any]) -> 'LogEvent':
        return cls(
            timestamp=event.get('timestamp', 0),
            message=event.get('message', ''),
            log_stream_name=event.get('logStreamName'),
            event_id=event.get('eventId'),
            ingestion_time=event.get('ingestionTime'),
        )


@dataclass
class InvocationResult:
    """Response of a synchronous Lambda invoke."""
    status_code: int
    payload: Any = None
    log_result: Optional[str] = None
    function_error: Optional[str] = None
    executed_version: Optional[str] = None


@dataclass
class ProcessingResult:
    """Outcome of sending messages and waiting for the queue to drain."""
    message_ids: List[str]
    processing_time_ms: int
    expected_processing_time_ms: Optional[int] = None

    @property
    def message_id(self) -> Optional[str]:
        return self.message_ids[0] if self.message_ids else None

    @property
    def within_sla(self) -> bool:
        if self.expected_processing_time_ms is None:
            return True
        return self.processing_time_ms < self.expected_processing_time_ms


@dataclass
class ErrorHandlingResult:
    """Outcome of sending a malformed message."""
    message_id: str
    remaining_messages: int


@dataclass
class LoadTestResult:
    """
    Throughput of a load run.

    throughput is messages per second over the whole run, including the
    drain wait, so it is a coarse measure.
    """
    message_count: int
    total_time_ms: int
    throughput: float
    average_time_per_message_ms: float
