"""
Bucket existence checks run before any replication is configured.
"""

import logging
from typing import Iterable, List

from . import LOG_PREFIX
from .aws_client import AWSReplicationClient
from .config import ReplicationPairConfig

logger = logging.getLogger(__name__)


def referenced_buckets(pairs: Iterable[ReplicationPairConfig]) -> List[str]:
    """
    List every distinct bucket name used by the pairs.

    Args:
        pairs: Replication pairs in configuration order

    Returns:
        Bucket names in first-seen order, main bucket before replication bucket
    """
    names: List[str] = []
    for pair in pairs:
        for bucket in (pair.main_bucket, pair.replication_bucket):
            if bucket.name not in names:
                names.append(bucket.name)
    return names


def validate_bucket_exists(client: AWSReplicationClient, bucket_name: str) -> bool:
    exists = client.bucket_exists(bucket_name, expected_owner=client.get_account_id())
    if not exists:
        logger.warning(
            f"{LOG_PREFIX} Bucket {bucket_name} does not exist yet. "
            f"Replication will only be configured when all buckets exist"
        )
    return exists


def all_buckets_exist(
    client: AWSReplicationClient, pairs: Iterable[ReplicationPairConfig]
) -> bool:
    """
    Check that every bucket referenced by the pairs exists in the caller's account.

    Every bucket is checked, so all missing buckets get reported in one run.

    Args:
        client: AWSReplicationClient instance
        pairs: Replication pairs to check

    Returns:
        True only if all referenced buckets exist

    Raises:
        botocore.exceptions.ClientError: For errors other than a missing bucket
    """
    all_exist = True
    for bucket_name in referenced_buckets(pairs):
        if not validate_bucket_exists(client, bucket_name):
            all_exist = False
    return all_exist
