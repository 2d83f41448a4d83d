"""
End-to-end tests for the replication setup against moto's in-memory
S3, IAM and STS backends.
"""

import json
import logging

import pytest
from botocore.exceptions import ClientError

from s3_two_way_replication.config import parse_config
from s3_two_way_replication.replication import S3TwoWayReplication

pytestmark = pytest.mark.integration


def single_pair_config():
    return parse_config(
        {
            "service": "my-service",
            "custom": {
                "s3TwoWayReplicationPlugin": {
                    "twoWayReplication": [
                        {
                            "mainBucket": {"us-east-1": "bucket-a"},
                            "replicationBucket": {"eu-west-1": "bucket-b"},
                        }
                    ]
                }
            },
        }
    )


class TestReplicationSetupEndToEnd:
    """Scenarios run against mocked AWS services."""

    def test_single_pair(self, moto_aws, create_versioned_bucket):
        """Test that the main bucket replicates into its counterpart."""
        create_versioned_bucket("bucket-a")
        create_versioned_bucket("bucket-b")

        outcome = S3TwoWayReplication(moto_aws).run(single_pair_config())

        assert outcome.ready is True
        role = moto_aws.iam.get_role(RoleName="my-service-us-east-1-s3-rep-role")["Role"]
        assert role["Arn"] == "arn:aws:iam::123456789012:role/my-service-us-east-1-s3-rep-role"

        config = moto_aws.s3.get_bucket_replication(Bucket="bucket-a")["ReplicationConfiguration"]
        assert config["Role"] == role["Arn"]
        assert len(config["Rules"]) == 1
        rule = config["Rules"][0]
        assert rule["Destination"]["Bucket"] == "arn:aws:s3:::bucket-b"
        assert rule["Priority"] == 0
        assert rule["Status"] == "Enabled"

    def test_policy_is_attached(self, moto_aws, create_versioned_bucket):
        """Test the inline policy stored on the replication role."""
        create_versioned_bucket("bucket-a")
        create_versioned_bucket("bucket-b")

        S3TwoWayReplication(moto_aws).run(single_pair_config())

        policy = moto_aws.iam.get_role_policy(
            RoleName="my-service-us-east-1-s3-rep-role",
            PolicyName="s3-replication-policy-bucket-a",
        )["PolicyDocument"]
        if isinstance(policy, str):
            policy = json.loads(policy)
        assert policy["Statement"][2]["Resource"] == ["arn:aws:s3:::bucket-b/*"]

    def test_rerun_reuses_role(self, moto_aws, create_versioned_bucket):
        """Test that running twice neither fails nor duplicates the role."""
        create_versioned_bucket("bucket-a")
        create_versioned_bucket("bucket-b")
        setup = S3TwoWayReplication(moto_aws)

        first = setup.run(single_pair_config())
        second = setup.run(single_pair_config())

        assert first.roles == second.roles
        names = [r["RoleName"] for r in moto_aws.iam.list_roles()["Roles"]]
        assert names.count("my-service-us-east-1-s3-rep-role") == 1

    def test_missing_replication_bucket(self, moto_aws, create_versioned_bucket, caplog):
        """Test that a missing bucket leaves AWS untouched and does not fail."""
        create_versioned_bucket("bucket-a")

        with caplog.at_level(logging.WARNING):
            outcome = S3TwoWayReplication(moto_aws).run(single_pair_config())

        assert outcome.ready is False
        assert "bucket-b" in caplog.text
        with pytest.raises(ClientError):
            moto_aws.iam.get_role(RoleName="my-service-us-east-1-s3-rep-role")
        with pytest.raises(ClientError):
            moto_aws.s3.get_bucket_replication(Bucket="bucket-a")
