"""
Central pytest configuration and fixtures for lambda_harness tests.

This module provides reusable fixtures for:
- AWS service mocking (SQS, S3, SNS, CloudWatch Logs, DynamoDB) with moto
- A fake clock driving the poll loops
- A simulated Lambda consumer that drains the queue and writes log lines
- Environment variable setup
"""
import os
import time as real_time
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from lambda_harness.cloudwatch_logs import lambda_log_group
from lambda_harness.harness_config import AwsClientConfig, HarnessConfig
from lambda_harness.pytest_plugin import LIVE_ENV_VAR


REGION = 'us-east-1'
QUEUE_NAME = 'test-queue'
BUCKET_NAME = 'test-bucket'
TOPIC_NAME = 'test-topic'
TABLE_NAME = 'test-table'


# ==============================================================================
# Environment Setup
# ==============================================================================

@pytest.fixture(scope='session', autouse=True)
def set_test_environment():
    """Set up test environment variables for all tests.

    Left alone for live runs (LAMBDA_HARNESS_LIVE=1), which need the real
    credentials and endpoint; run those with `pytest tests/live`.
    """
    if os.environ.get(LIVE_ENV_VAR) == '1':
        yield
        return

    os.environ['AWS_DEFAULT_REGION'] = REGION
    os.environ['AWS_REGION'] = REGION
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    # Never point moto-backed clients at a real emulator
    os.environ.pop('AWS_ENDPOINT_URL', None)

    yield


@pytest.fixture
def aws_client_config():
    """Client config with the moto test credentials."""
    return AwsClientConfig(
        region=REGION,
        access_key_id='testing',
        secret_access_key='testing',
        session_token='testing'
    )


# ==============================================================================
# Fake Clock
# ==============================================================================

class FakeClock:
    """
    Replaces the time module inside lambda_harness.polling.

    sleep() advances both clocks instantly and then runs the registered
    hooks, which is where tests make the "remote" side change state.
    """

    def __init__(self):
        # Whole seconds keep epoch-ms arithmetic exact
        self.now = float(int(real_time.time()))
        self.mono = 1000.0
        self.sleeps = []
        self.hooks = []

    def time(self):
        return self.now

    def monotonic(self):
        return self.mono

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds
        self.mono += seconds
        # moto compares visibility times in real milliseconds
        real_time.sleep(0.002)
        for hook in list(self.hooks):
            hook(self)

    def epoch_ms(self):
        return int(self.now * 1000)

    def on_sleep(self, hook):
        self.hooks.append(hook)


@pytest.fixture
def fake_clock():
    clock = FakeClock()
    with patch('lambda_harness.polling.time', clock):
        yield clock


# ==============================================================================
# AWS Fixtures
# ==============================================================================

@pytest.fixture
def mock_aws_services():
    """Activate moto for every AWS service used by the harness."""
    with mock_aws():
        yield


@pytest.fixture
def sqs_queue_url(mock_aws_services):
    sqs = boto3.client('sqs', region_name=REGION)
    return sqs.create_queue(QueueName=QUEUE_NAME)['QueueUrl']


@pytest.fixture
def s3_bucket(mock_aws_services):
    s3 = boto3.client('s3', region_name=REGION)
    s3.create_bucket(Bucket=BUCKET_NAME)
    return BUCKET_NAME


@pytest.fixture
def sns_topic_arn(mock_aws_services):
    sns = boto3.client('sns', region_name=REGION)
    return sns.create_topic(Name=TOPIC_NAME)['TopicArn']


@pytest.fixture
def dynamodb_table(mock_aws_services):
    """Table keyed by poc_id, as used by the record-store demo."""
    dynamodb = boto3.client('dynamodb', region_name=REGION)
    dynamodb.create_table(
        TableName=TABLE_NAME,
        KeySchema=[{'AttributeName': 'poc_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'poc_id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    return TABLE_NAME


@pytest.fixture
def harness_config(sqs_queue_url, s3_bucket, sns_topic_arn, dynamodb_table):
    """HarnessConfig pointing at the moto resources."""
    return HarnessConfig(
        queue_url=sqs_queue_url,
        bucket_name=s3_bucket,
        topic_arn=sns_topic_arn,
        dynamodb_table_name=dynamodb_table,
        region=REGION,
        timeout_ms=30000
    )


@pytest.fixture
def aws_config(aws_client_config, mock_aws_services):
    """Plugin override: lambda_helper, logs_helper and dynamodb_helper get moto clients."""
    return aws_client_config


# ==============================================================================
# Simulated Lambda
# ==============================================================================

class SimulatedLambda:
    """
    Plays the function under test: reads the queue, deletes what it read
    and writes one log line per message to /aws/lambda/<function_name>.
    """

    def __init__(self, function_name, queue_url=None):
        self.function_name = function_name
        self.queue_url = queue_url
        self.log_group = lambda_log_group(function_name)
        self.sqs = boto3.client('sqs', region_name=REGION)
        self.logs = boto3.client('logs', region_name=REGION)
        self.processed = []
        self.logs.create_log_group(logGroupName=self.log_group)
        self.logs.create_log_stream(logGroupName=self.log_group, logStreamName='stream-1')

    def log(self, message, timestamp_ms=None):
        self.logs.put_log_events(
            logGroupName=self.log_group,
            logStreamName='stream-1',
            logEvents=[{
                'timestamp': timestamp_ms if timestamp_ms is not None else int(real_time.time() * 1000),
                'message': message
            }]
        )

    def consume(self, timestamp_ms=None):
        """Process everything currently visible on the queue."""
        while True:
            messages = self.sqs.receive_message(
                QueueUrl=self.queue_url, MaxNumberOfMessages=10, WaitTimeSeconds=0
            ).get('Messages', [])
            if not messages:
                return
            for message in messages:
                self.log(f"Processing message: {message['Body']}", timestamp_ms)
                self.sqs.delete_message(QueueUrl=self.queue_url, ReceiptHandle=message['ReceiptHandle'])
                self.processed.append(message['Body'])


@pytest.fixture
def simulated_lambda_factory(mock_aws_services):
    """Build a SimulatedLambda for any function name (and optional queue)."""
    return SimulatedLambda


@pytest.fixture
def simulated_lambda(simulated_lambda_factory, sqs_queue_url):
    return simulated_lambda_factory('test-function-sqs', sqs_queue_url)


# ==============================================================================
# Helper Functions
# ==============================================================================

def queue_message_count(queue_url):
    """Visible plus in-flight messages, read straight from moto."""
    sqs = boto3.client('sqs', region_name=REGION)
    attributes = sqs.get_queue_attributes(
        QueueUrl=queue_url,
        AttributeNames=['ApproximateNumberOfMessages', 'ApproximateNumberOfMessagesNotVisible']
    )['Attributes']
    return int(attributes['ApproximateNumberOfMessages']) + int(attributes['ApproximateNumberOfMessagesNotVisible'])


pytest.queue_message_count = queue_message_count
