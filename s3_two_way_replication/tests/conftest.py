"""
Pytest fixtures for S3 two-way replication tests.
"""

import os
from unittest.mock import MagicMock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from s3_two_way_replication.aws_client import AWSReplicationClient

ACCOUNT_ID = "123456789012"


def client_error(code: str, operation: str = "HeadBucket") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def make_client_error():
    """Factory for ClientErrors carrying a given error code."""
    return client_error


@pytest.fixture
def mock_env_vars():
    """Set up mock environment variables for testing."""
    env_vars = {
        "S3_REPLICATION_SERVICE_NAME": "env-service",
        "S3_REPLICATION_PAIRS": (
            "us-east-1:bucket-a=eu-west-1:bucket-b,eu-west-1:bucket-b=us-east-1:bucket-a"
        ),
    }
    with patch.dict(os.environ, env_vars):
        os.environ.pop("S3_REPLICATION_CONFIG", None)
        yield env_vars


@pytest.fixture
def sample_service_definition():
    """Sample service definition declaring both directions of one pair."""
    return {
        "service": "my-service",
        "provider": {"name": "aws", "region": "us-east-1"},
        "custom": {
            "s3TwoWayReplicationPlugin": {
                "twoWayReplication": [
                    {
                        "mainBucket": {"us-east-1": "bucket-a"},
                        "replicationBucket": {"eu-west-1": "bucket-b"},
                    },
                    {
                        "mainBucket": {"eu-west-1": "bucket-b"},
                        "replicationBucket": {"us-east-1": "bucket-a"},
                    },
                ]
            }
        },
    }


@pytest.fixture
def mock_aws_client():
    """AWSReplicationClient whose S3, IAM and STS clients are mocks."""
    s3 = MagicMock()
    iam = MagicMock()
    sts = MagicMock()
    sts.get_caller_identity.return_value = {"Account": ACCOUNT_ID}
    return AWSReplicationClient(s3_client=s3, iam_client=iam, sts_client=sts)


@pytest.fixture
def aws_credentials():
    """Fake credentials so moto never reaches a real account."""
    env_vars = {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def moto_aws(aws_credentials):
    """Mocked S3, IAM and STS clients plus a replication client built on them."""
    with mock_aws():
        s3 = boto3.client("s3", region_name="us-east-1")
        iam = boto3.client("iam", region_name="us-east-1")
        sts = boto3.client("sts", region_name="us-east-1")
        client = AWSReplicationClient(s3_client=s3, iam_client=iam, sts_client=sts)
        yield client


@pytest.fixture
def create_versioned_bucket(moto_aws):
    """Factory creating versioned buckets in the mocked account."""

    def _create(bucket_name: str) -> None:
        moto_aws.s3.create_bucket(Bucket=bucket_name)
        moto_aws.s3.put_bucket_versioning(
            Bucket=bucket_name,
            VersioningConfiguration={"Status": "Enabled"},
        )

    return _create
