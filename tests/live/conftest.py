"""
Fixtures for tests against deployed resources.

Restores the plugin's environment-driven client config that tests/conftest.py
replaces with moto. Run with:

    LAMBDA_HARNESS_LIVE=1 pytest tests/live
"""
import pytest

from lambda_harness.harness_config import AwsClientConfig


@pytest.fixture(scope='session')
def aws_config(harness_environment):
    return AwsClientConfig.from_env()
