"""
Replication Role Provisioning

Creates (or reuses) the IAM role S3 assumes to replicate a main bucket and
attaches the inline policy scoped to its source and target buckets.
"""

import json
import logging
from typing import Dict, Iterable

from . import LOG_PREFIX, TAG
from .aws_client import S3_ARN_PREFIX, AWSReplicationClient
from .config import BucketRef
from .plan import ReplicationPlan, ReplicationPlanEntry

logger = logging.getLogger(__name__)

POLICY_NAME_PREFIX = "s3-replication-policy"
POLICY_VERSION = "2012-10-17"


def role_name_for(service_name: str, region: str) -> str:
    """Name of the replication role for a service in a region."""
    return f"{service_name}-{region}-s3-rep-role"


def policy_name_for(main_bucket: str) -> str:
    """Name of the inline replication policy for a main bucket."""
    return f"{POLICY_NAME_PREFIX}-{main_bucket}"


def assume_role_policy_document() -> str:
    """Trust policy letting the S3 service assume the replication role."""
    return json.dumps(
        {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": ["s3.amazonaws.com"]},
                    "Action": ["sts:AssumeRole"],
                }
            ],
        }
    )


def replication_policy_document(source_bucket: str, target_buckets: Iterable[BucketRef]) -> str:
    """
    Build the permission policy for replicating one source bucket.

    Args:
        source_bucket: Name of the main bucket
        target_buckets: Buckets the main bucket replicates into

    Returns:
        Policy JSON document
    """
    source_arn = f"{S3_ARN_PREFIX}{source_bucket}"
    target_arns = [f"{target.arn}/*" for target in target_buckets]

    return json.dumps(
        {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": ["s3:GetReplicationConfiguration", "s3:ListBucket"],
                    "Resource": [source_arn],
                },
                {
                    "Effect": "Allow",
                    "Action": [
                        "s3:GetObjectVersionForReplication",
                        "s3:GetObjectVersionAcl",
                        "s3:GetObjectVersionTagging",
                    ],
                    "Resource": [f"{source_arn}/*"],
                },
                {
                    "Effect": "Allow",
                    "Action": [
                        "s3:ReplicateObject",
                        "s3:ReplicateDelete",
                        "s3:ReplicateTags",
                    ],
                    "Resource": target_arns,
                },
            ],
        }
    )


class RoleProvisioner:
    """Get-or-create replication roles for plan entries."""

    def __init__(self, client: AWSReplicationClient, service_name: str):
        """
        Initialize the role provisioner.

        Args:
            client: AWSReplicationClient instance
            service_name: Name of the deployed service, used in role names
        """
        self.client = client
        self.service_name = service_name

    def ensure_role(self, entry: ReplicationPlanEntry) -> str:
        """
        Ensure the replication role for a plan entry exists with a current policy.

        An existing role is reused as is; its inline policy is always rewritten.

        Args:
            entry: Plan entry of the main bucket

        Returns:
            Name of the role
        """
        role_name = role_name_for(self.service_name, entry.region)
        # One role per region, so main buckets sharing a region need their own policy.
        policy_name = policy_name_for(entry.main_bucket)

        created = self.client.create_role(
            role_name,
            assume_role_policy_document(),
            tags=[{"Key": TAG, "Value": TAG}],
        )
        if created:
            logger.info(f"{LOG_PREFIX} Created replication role {role_name}")
        else:
            logger.info(f"{LOG_PREFIX} Replication role already exists: {role_name}")

        self.client.put_role_policy(
            role_name,
            policy_name,
            replication_policy_document(entry.main_bucket, entry.target_buckets),
        )
        logger.info(
            f"{LOG_PREFIX} Attached {policy_name} to {role_name} for bucket {entry.main_bucket}"
        )

        return role_name

    def provision(self, plan: ReplicationPlan) -> Dict[str, str]:
        """
        Provision a replication role for every plan entry.

        Args:
            plan: Replication plan

        Returns:
            Mapping of main bucket name to role name
        """
        return {entry.main_bucket: self.ensure_role(entry) for entry in plan}
