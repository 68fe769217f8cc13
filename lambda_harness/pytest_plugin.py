"""
pytest fixtures for Lambda tests.

Enable in a conftest.py with:

    pytest_plugins = ['lambda_harness.pytest_plugin']

Fixtures:
- aws_config / lambda_config: settings from the environment and .env (session)
- lambda_helper: SQS / Lambda / S3 / SNS operations
- logs_helper, dynamodb_helper: CloudWatch Logs and DynamoDB helpers
- lambda_test_suite: purge / send / drain scenarios on lambda_config.queue_url
- uploaded_objects: S3 uploads deleted at teardown (best-effort)
- postgres_helper, sqlserver_helper: PostgreSQL and SQL Server query helpers

Tests marked `live` need real (or LocalStack) resources and only run when
LAMBDA_HARNESS_LIVE=1.
"""
import os
from typing import List, Tuple

import pytest

from lambda_harness.cloudwatch_logs import CloudWatchLogsHelper
from lambda_harness.dynamodb_operations import DynamoDBTestHelper
from lambda_harness.harness_config import (
    POSTGRES_DEFAULTS,
    SQLSERVER_DEFAULTS,
    AwsClientConfig,
    DatabaseConfig,
    HarnessConfig,
    load_environment
)
from lambda_harness.lambda_test_helper import LambdaTestHelper
from lambda_harness.lambda_test_suite import LambdaTestSuite
from lambda_harness.models import S3UploadObject
from lambda_harness.postgres_utils import PostgresTestHelper
from lambda_harness.sqlserver_utils import SqlServerTestHelper


LIVE_ENV_VAR = 'LAMBDA_HARNESS_LIVE'


def pytest_configure(config):
    config.addinivalue_line(
        'markers',
        f"live: needs deployed AWS resources; runs only with {LIVE_ENV_VAR}=1"
    )


def pytest_collection_modifyitems(config, items):
    if os.environ.get(LIVE_ENV_VAR) == '1':
        return
    skip_live = pytest.mark.skip(reason=f"live test; set {LIVE_ENV_VAR}=1 to run")
    for item in items:
        if 'live' in item.keywords:
            item.add_marker(skip_live)


# ==============================================================================
# Configuration
# ==============================================================================

@pytest.fixture(scope='session')
def harness_environment():
    """Load .env once per session."""
    load_environment()


@pytest.fixture(scope='session')
def aws_config(harness_environment) -> AwsClientConfig:
    return AwsClientConfig.from_env()


@pytest.fixture(scope='session')
def lambda_config(harness_environment) -> HarnessConfig:
    return HarnessConfig.from_env()


# ==============================================================================
# AWS helpers
# ==============================================================================

@pytest.fixture
def lambda_helper(aws_config) -> LambdaTestHelper:
    return LambdaTestHelper(aws_config)


@pytest.fixture
def logs_helper(aws_config) -> CloudWatchLogsHelper:
    return CloudWatchLogsHelper(aws_config)


@pytest.fixture
def dynamodb_helper(aws_config) -> DynamoDBTestHelper:
    return DynamoDBTestHelper(aws_config)


@pytest.fixture
def lambda_test_suite(lambda_helper, lambda_config) -> LambdaTestSuite:
    return LambdaTestSuite(lambda_helper, lambda_config)


@pytest.fixture
def uploaded_objects(lambda_helper):
    """
    Upload objects and have them deleted after the test.

    Yields a function (bucket_name, S3UploadObject) -> ETag.
    """
    uploads: List[Tuple[str, str]] = []

    def upload(bucket_name: str, upload_object: S3UploadObject) -> str:
        etag = lambda_helper.upload_file_to_s3(bucket_name, upload_object)
        uploads.append((bucket_name, upload_object.filename))
        return etag

    yield upload

    for bucket_name, key in uploads:
        lambda_helper.delete_s3_object(bucket_name, key)


# ==============================================================================
# Database helpers
# ==============================================================================

@pytest.fixture
def postgres_helper(harness_environment):
    return PostgresTestHelper(DatabaseConfig.from_env('POSTGRES', POSTGRES_DEFAULTS))


@pytest.fixture
def sqlserver_helper(harness_environment):
    return SqlServerTestHelper(DatabaseConfig.from_env('SQLSERVER', SQLSERVER_DEFAULTS))
