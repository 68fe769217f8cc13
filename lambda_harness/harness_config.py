"""
Harness configuration.
Loads target resource names and AWS client settings from environment
variables (and a local .env file, when present).
"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import boto3
from botocore.config import Config
from dotenv import load_dotenv


DEFAULT_REGION = 'us-east-1'


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class AwsClientConfig:
    """
    Everything needed to build a boto3 client.

    Passed explicitly to each service wrapper instead of sharing module-level
    clients, so a test run owns the lifetime of its clients.
    """
    region: str = DEFAULT_REGION
    access_key_id: str = 'test'
    secret_access_key: str = 'test'
    session_token: Optional[str] = None
    endpoint_url: Optional[str] = None
    max_retries: int = 3

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'AwsClientConfig':
        """
        Build from AWS_* variables.

        AWS_ENDPOINT_URL points every client at LocalStack or another
        emulator; leave it unset for real AWS.
        """
        env = os.environ if env is None else env
        return cls(
            region=env.get('AWS_REGION', DEFAULT_REGION),
            access_key_id=env.get('AWS_ACCESS_KEY_ID', 'test'),
            secret_access_key=env.get('AWS_SECRET_ACCESS_KEY', 'test'),
            session_token=env.get('AWS_SESSION_TOKEN') or None,
            endpoint_url=env.get('AWS_ENDPOINT_URL') or None,
            max_retries=_env_int(env, 'MAX_RETRIES', 3),
        )

    def client(self, service_name: str):
        """Create a new boto3 client for service_name."""
        session = boto3.session.Session(
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            aws_session_token=self.session_token,
            region_name=self.region,
        )
        return session.client(
            service_name,
            endpoint_url=self.endpoint_url,
            config=Config(retries={'max_attempts': self.max_retries, 'mode': 'standard'}),
        )


@dataclass
class HarnessConfig:
    """Names of the resources under test and the default poll budget."""
    lambda_function_direct_invoke: str = 'test-function'
    lambda_function_sqs_invoke: str = 'test-function-sqs'
    lambda_function_s3_invoke: str = 'test-function-s3'
    lambda_function_sns_invoke: str = 'test-function-sns'
    queue_url: str = 'http://localhost:4566/000000000000/test-queue'
    bucket_name: str = 'test-bucket'
    topic_arn: str = 'arn:aws:sns:us-east-1:123456789012:test-topic'
    dynamodb_table_name: str = 'test-table'
    region: str = DEFAULT_REGION
    timeout_ms: int = 30000
    max_retries: int = 3

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'HarnessConfig':
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            lambda_function_direct_invoke=env.get('LAMBDA_FUNCTION_NAME_DIRECT_INVOKE', defaults.lambda_function_direct_invoke),
            lambda_function_sqs_invoke=env.get('LAMBDA_FUNCTION_NAME_SQS_INVOKE', defaults.lambda_function_sqs_invoke),
            lambda_function_s3_invoke=env.get('LAMBDA_FUNCTION_NAME_S3_INVOKE', defaults.lambda_function_s3_invoke),
            lambda_function_sns_invoke=env.get('LAMBDA_FUNCTION_NAME_SNS_INVOKE', defaults.lambda_function_sns_invoke),
            queue_url=env.get('SQS_QUEUE_URL', defaults.queue_url),
            bucket_name=env.get('S3_BUCKET_NAME', defaults.bucket_name),
            topic_arn=env.get('SNS_TOPIC_ARN', defaults.topic_arn),
            dynamodb_table_name=env.get('DYNAMODB_TABLE_NAME', defaults.dynamodb_table_name),
            region=env.get('AWS_REGION', defaults.region),
            timeout_ms=_env_int(env, 'LAMBDA_TIMEOUT', defaults.timeout_ms),
            max_retries=_env_int(env, 'MAX_RETRIES', defaults.max_retries),
        )


@dataclass
class DatabaseConfig:
    """Connection settings for a database the system under test writes to."""
    host: str = 'localhost'
    port: int = 5432
    user: str = ''
    password: str = ''
    database: str = ''
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, prefix: str, defaults: 'DatabaseConfig', env: Optional[Mapping[str, str]] = None) -> 'DatabaseConfig':
        """Read {prefix}_HOST, _PORT, _USER, _PASSWORD and _DATABASE."""
        env = os.environ if env is None else env
        return cls(
            host=env.get(f'{prefix}_HOST', defaults.host),
            port=_env_int(env, f'{prefix}_PORT', defaults.port),
            user=env.get(f'{prefix}_USER', defaults.user),
            password=env.get(f'{prefix}_PASSWORD', defaults.password),
            database=env.get(f'{prefix}_DATABASE', defaults.database),
            options=dict(defaults.options),
        )


POSTGRES_DEFAULTS = DatabaseConfig(host='localhost', port=5432, user='postgres', database='postgres')
SQLSERVER_DEFAULTS = DatabaseConfig(host='localhost', port=1433, user='sa', database='master')


def load_environment(dotenv_path: Optional[str] = None) -> None:
    """Load a .env file into os.environ without overriding existing values."""
    load_dotenv(dotenv_path=dotenv_path, override=False)
