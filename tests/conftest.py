"""
Module: conftest.py
Description: Shared pytest fixtures for SQS broker tests.

Provides reusable fixtures for settings, CloudFormation clients, fake
stack clients and providers. Uses moto and botocore's Stubber for AWS
so tests never reach a real account.
"""

from unittest.mock import AsyncMock, MagicMock

import boto3
import pytest

from broker.provider import SQSProvider
from config.settings import Settings
from stacks.base import StackClient
from stacks.client import StackLifecycleClient

TEST_PREFIX = "test-queue-prefix-"
TEST_ENVIRONMENT = "test"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake AWS credentials so no test can touch a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-2")


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Disables .env loading for predictable tests.
    """
    return Settings(
        _env_file=None,
        stage="test",
        deploy_env=TEST_ENVIRONMENT,
        resource_prefix=TEST_PREFIX,
        broker_username="broker",
        broker_password="secret",
        service_id="uuid-1",
        standard_plan_id="uuid-2",
        fifo_plan_id="uuid-3",
    )


@pytest.fixture
def cloudformation():
    """Real boto3 CloudFormation client, for use with Stubber."""
    return boto3.client("cloudformation", region_name="eu-west-2")


@pytest.fixture
def mock_cloudformation():
    """
    MagicMock standing in for a boto3 CloudFormation client.

    describe_stacks returns a single stack in CREATE_COMPLETE by
    default; tests override return values or side effects as needed.
    """
    client = MagicMock()
    client.describe_stacks.return_value = {
        "Stacks": [{"StackName": "ignored", "StackStatus": "CREATE_COMPLETE"}]
    }
    client.create_stack.return_value = {"StackId": "arn:aws:cloudformation:eu-west-2:123456789012:stack/x/1"}
    client.delete_stack.return_value = {}
    return client


@pytest.fixture
def stack_client(mock_cloudformation):
    """StackLifecycleClient backed by the MagicMock CloudFormation client."""
    return StackLifecycleClient(TEST_PREFIX, mock_cloudformation)


@pytest.fixture
def fake_stack_client():
    """StackClient fake with AsyncMock operations."""
    client = MagicMock(spec=StackClient)
    client.create_stack = AsyncMock(return_value=None)
    client.delete_stack = AsyncMock(return_value=None)
    client.get_stack_status = AsyncMock(return_value="CREATE_IN_PROGRESS")
    return client


@pytest.fixture
def provider(fake_stack_client):
    """SQSProvider over the fake stack client."""
    return SQSProvider(fake_stack_client, TEST_ENVIRONMENT)
