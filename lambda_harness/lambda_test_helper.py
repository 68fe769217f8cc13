"""
One object for the four ways a test can trigger a Lambda: SQS message,
direct invoke, S3 upload, SNS publish.
"""
from typing import Any, Dict, List

from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.lambda_operations import LambdaOperations
from lambda_harness.models import InvocationResult, S3UploadObject, SnsMessage, SqsMessage
from lambda_harness.polling import PollOutcome
from lambda_harness.s3_operations import S3Operations
from lambda_harness.sns_operations import SnsOperations
from lambda_harness.sqs_operations import SqsOperations


class LambdaTestHelper:
    """
    Facade over the per-service wrappers.

    Each wrapper owns its own client built from the same AwsClientConfig.
    The wrappers are also available directly as .sqs, .lambda_ops, .s3 and
    .sns for calls the facade does not forward.
    """

    def __init__(self, config: AwsClientConfig):
        self.config = config
        self.sqs = SqsOperations(config)
        self.lambda_ops = LambdaOperations(config)
        self.s3 = S3Operations(config)
        self.sns = SnsOperations(config)

    def send_message(self, queue_url: str, message: SqsMessage) -> str:
        return self.sqs.send_message(queue_url, message)

    def send_messages(self, queue_url: str, messages: List[SqsMessage]) -> List[str]:
        return self.sqs.send_messages(queue_url, messages)

    def receive_messages(self, queue_url: str, max_messages: int = 10) -> List[Dict[str, Any]]:
        return self.sqs.receive_messages(queue_url, max_messages=max_messages)

    def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        self.sqs.delete_message(queue_url, receipt_handle)

    def purge_queue(self, queue_url: str) -> int:
        return self.sqs.purge_queue(queue_url)

    def wait_for_lambda_processing(self, queue_url: str, expected_message_count: int = 0,
                                   timeout_ms: int = 30000, **kwargs) -> PollOutcome:
        return self.sqs.wait_for_lambda_processing(
            queue_url, expected_message_count, timeout_ms, **kwargs
        )

    def invoke_lambda(self, function_name: str, payload: Any, include_logs: bool = False) -> InvocationResult:
        return self.lambda_ops.invoke(function_name, payload, include_logs=include_logs)

    def upload_file_to_s3(self, bucket_name: str, upload_object: S3UploadObject) -> str:
        return self.s3.upload_file(bucket_name, upload_object)

    def delete_s3_object(self, bucket_name: str, file_name: str) -> bool:
        return self.s3.delete_object(bucket_name, file_name)

    def publish_sns_message(self, topic_arn: str, message: SnsMessage) -> str:
        return self.sns.publish(topic_arn, message)
