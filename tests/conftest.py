"""
Pytest configuration and fixtures.
"""
import os
import sys

import boto3
import pytest
from moto import mock_aws

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from summary_cache.data_access import (  # noqa: E402
    CorrelationTable,
    DedupLock,
    DynamoDBClient,
    DynamoDBExpiringStore,
    SummaryRepository,
)

TEST_TABLE_NAME = 'SummaryStore-test'


class FakeClock:
    """Settable epoch clock for TTL tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def aws_credentials():
    """Mock AWS credentials for testing."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture(scope="session", autouse=True)
def env_vars():
    """Set up environment variables for tests."""
    os.environ["SUMMARY_STORE_TABLE_NAME"] = TEST_TABLE_NAME
    os.environ["AWS_REGION"] = "us-east-1"
    os.environ["REPLICATE_API_TOKEN"] = "r8_test_token"
    os.environ["REPLICATE_MODEL_VERSION"] = "test-model-version"
    os.environ["WEBHOOK_BASE_URL"] = "https://summaries.example.test"
    os.environ["METRICS_ENABLED"] = "false"
    os.environ["LOG_LEVEL"] = "DEBUG"


@pytest.fixture
def dynamodb_resource(aws_credentials):
    """Mocked DynamoDB resource with the summary store table."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        dynamodb.create_table(
            TableName=TEST_TABLE_NAME,
            KeySchema=[
                {'AttributeName': 'key', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'key', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        yield dynamodb


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(dynamodb_resource, clock):
    """Expiring store backed by the mocked table."""
    return DynamoDBExpiringStore(
        TEST_TABLE_NAME,
        dynamodb_client=DynamoDBClient(dynamodb_resource=dynamodb_resource),
        clock=clock
    )


@pytest.fixture
def repository(store):
    return SummaryRepository(store)


@pytest.fixture
def dedup_lock(store):
    return DedupLock(store)


@pytest.fixture
def correlations(store):
    return CorrelationTable(store)
