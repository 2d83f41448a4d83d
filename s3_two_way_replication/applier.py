"""
Applies the planned replication configuration to each main bucket.
"""

import logging
from typing import Any, Dict, List, Mapping

from . import LOG_PREFIX
from .aws_client import AWSReplicationClient
from .plan import ReplicationPlan, ReplicationPlanEntry

logger = logging.getLogger(__name__)


def replication_configuration(role_arn: str, entry: ReplicationPlanEntry) -> Dict[str, Any]:
    return {
        "Role": role_arn,
        "Rules": [rule.to_dict() for rule in entry.rules],
    }


class ReplicationApplier:
    """Puts bucket replication configurations in plan order."""

    def __init__(self, client: AWSReplicationClient):
        self.client = client

    def apply(self, plan: ReplicationPlan, roles: Mapping[str, str]) -> List[str]:
        """
        Put the replication configuration of every plan entry.

        A failure stops the loop; buckets applied before it keep their new
        configuration.

        Args:
            plan: Replication plan
            roles: Mapping of main bucket name to replication role name

        Returns:
            Names of the buckets whose configuration was put, in order
        """
        applied = []
        for entry in plan:
            role_arn = self.client.role_arn(roles[entry.main_bucket])
            logger.info(
                f"{LOG_PREFIX} Putting replication configuration on {entry.main_bucket} "
                f"({len(entry.rules)} rule(s), role {role_arn})"
            )
            self.client.put_bucket_replication(
                entry.main_bucket, replication_configuration(role_arn, entry)
            )
            applied.append(entry.main_bucket)
        return applied
