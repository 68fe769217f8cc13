"""
SNS publishing for notification-triggered Lambda tests.
"""
from typing import Any, Dict

from lambda_harness.errors import transport_errors
from lambda_harness.harness_config import AwsClientConfig
from lambda_harness.models import SnsMessage


class SnsOperations:

    def __init__(self, config: AwsClientConfig, client=None):
        self.config = config
        self.client = client if client is not None else config.client('sns')

    def publish(self, topic_arn: str, message: SnsMessage) -> str:
        """Publish a message to topic_arn and return its MessageId."""
        kwargs: Dict[str, Any] = {'TopicArn': topic_arn, 'Message': message.message}
        if message.subject:
            kwargs['Subject'] = message.subject
        if message.attributes:
            kwargs['MessageAttributes'] = message.attributes

        with transport_errors('sns.publish'):
            response = self.client.publish(**kwargs)
        return response.get('MessageId', '')
