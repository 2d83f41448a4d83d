"""
AWS Replication Client

Provides a thin Python interface over the S3, IAM and STS APIs used to
configure bucket replication: bucket existence checks, replication role
management and replication configuration.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from . import LOG_PREFIX

logger = logging.getLogger(__name__)

S3_ARN_PREFIX = "arn:aws:s3:::"

BUCKET_NOT_FOUND_CODES = ("404", "NotFound", "NoSuchBucket")
ROLE_ALREADY_EXISTS_CODE = "EntityAlreadyExists"


def error_code(error: ClientError) -> str:
    """Return the service error code carried by a ClientError."""
    return error.response.get("Error", {}).get("Code", "")


class AWSReplicationClient:
    """Client for the AWS calls needed to set up S3 replication."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        session: Optional[boto3.session.Session] = None,
        s3_client: Any = None,
        iam_client: Any = None,
        sts_client: Any = None,
        max_attempts: int = 3,
    ):
        """
        Initialize the replication client.

        Args:
            region: AWS region name (uses the default chain if not specified)
            profile: AWS CLI profile name
            session: Pre-configured boto3 session
            s3_client: Pre-configured S3 client (optional, for testing)
            iam_client: Pre-configured IAM client (optional, for testing)
            sts_client: Pre-configured STS client (optional, for testing)
            max_attempts: Attempts the SDK's standard retry mode may make per call
        """
        if session is None and None in (s3_client, iam_client, sts_client):
            session = boto3.Session(profile_name=profile, region_name=region)

        config = Config(retries={"max_attempts": max_attempts, "mode": "standard"})

        self.s3 = s3_client or session.client("s3", config=config)
        self.iam = iam_client or session.client("iam", config=config)
        self.sts = sts_client or session.client("sts", config=config)
        self._account_id: Optional[str] = None

    def get_account_id(self) -> str:
        """
        Get the account ID of the calling identity.

        Returns:
            The AWS account ID
        """
        if self._account_id is None:
            identity = self.sts.get_caller_identity()
            self._account_id = identity["Account"]
            logger.debug(f"{LOG_PREFIX} Resolved caller account {self._account_id}")
        return self._account_id

    def role_arn(self, role_name: str) -> str:
        """
        Build the account-qualified ARN of an IAM role.

        Args:
            role_name: Name of the role

        Returns:
            The role ARN
        """
        return f"arn:aws:iam::{self.get_account_id()}:role/{role_name}"

    # Bucket Operations
    def bucket_exists(self, bucket_name: str, expected_owner: Optional[str] = None) -> bool:
        """
        Check whether a bucket exists.

        Args:
            bucket_name: Name of the bucket
            expected_owner: Account ID that must own the bucket

        Returns:
            True if the bucket exists, False if it was not found

        Raises:
            botocore.exceptions.ClientError: For any error other than not found,
                including an owner mismatch or access denied
        """
        kwargs = {"Bucket": bucket_name}
        if expected_owner:
            kwargs["ExpectedBucketOwner"] = expected_owner

        try:
            self.s3.head_bucket(**kwargs)
        except ClientError as e:
            if error_code(e) in BUCKET_NOT_FOUND_CODES:
                return False
            raise
        return True

    def put_bucket_replication(self, bucket_name: str, configuration: Dict[str, Any]) -> None:
        """
        Put a replication configuration on a bucket, replacing any existing one.

        Args:
            bucket_name: Name of the source bucket
            configuration: Replication configuration with Role and Rules
        """
        self.s3.put_bucket_replication(
            Bucket=bucket_name,
            ReplicationConfiguration=configuration,
        )

    # Role Operations
    def create_role(
        self,
        role_name: str,
        assume_role_policy: str,
        tags: Optional[List[Dict[str, str]]] = None,
    ) -> bool:
        """
        Create an IAM role unless it already exists.

        Args:
            role_name: Name of the role
            assume_role_policy: Trust policy JSON document
            tags: Role tags as Key/Value dictionaries

        Returns:
            True if the role was created, False if it already existed
        """
        try:
            self.iam.create_role(
                RoleName=role_name,
                AssumeRolePolicyDocument=assume_role_policy,
                Tags=tags or [],
            )
        except ClientError as e:
            if error_code(e) != ROLE_ALREADY_EXISTS_CODE:
                raise
            return False
        return True

    def put_role_policy(self, role_name: str, policy_name: str, policy_document: str) -> None:
        """
        Attach or replace an inline policy on a role.

        Args:
            role_name: Name of the role
            policy_name: Name of the inline policy
            policy_document: Policy JSON document
        """
        self.iam.put_role_policy(
            RoleName=role_name,
            PolicyName=policy_name,
            PolicyDocument=policy_document,
        )
