"""
S3 Two-Way Replication Setup

Runs the replication setup pipeline for a service: bucket existence check,
plan building, role provisioning and replication apply.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from . import LOG_PREFIX
from .applier import ReplicationApplier
from .aws_client import AWSReplicationClient
from .config import ServiceConfig, load_config_from_env, load_config_from_file
from .plan import ReplicationPlan, build_replication_plan
from .roles import RoleProvisioner
from .validator import all_buckets_exist

logger = logging.getLogger(__name__)


class ReplicationState(Enum):
    CHECK_EXISTENCE = "check_existence"
    BUILD_PLAN = "build_plan"
    PROVISION_ROLES = "provision_roles"
    APPLY_REPLICATION = "apply_replication"
    DONE = "done"


@dataclass
class ReplicationOutcome:
    """Result of a replication setup run."""

    ready: bool
    plan: ReplicationPlan = field(default_factory=ReplicationPlan)
    roles: Dict[str, str] = field(default_factory=dict)
    applied: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "ready": self.ready,
            "buckets": [
                {
                    "name": entry.main_bucket,
                    "region": entry.region,
                    "role": self.roles.get(entry.main_bucket),
                    "targets": [target.name for target in entry.target_buckets],
                    "applied": entry.main_bucket in self.applied,
                }
                for entry in self.plan
            ],
        }


class S3TwoWayReplication:
    """Configure two-way replication for the buckets of a service."""

    def __init__(self, client: AWSReplicationClient):
        """
        Initialize the replication setup.

        Args:
            client: AWSReplicationClient instance
        """
        self.client = client
        self.state: Optional[ReplicationState] = None

    def _enter(self, state: ReplicationState) -> None:
        previous = self.state.value if self.state else "start"
        logger.debug(f"{LOG_PREFIX} {previous} -> {state.value}")
        self.state = state

    def run(self, config: ServiceConfig) -> ReplicationOutcome:
        """
        Run the replication setup for a service.

        If any referenced bucket is missing the run stops after the existence
        check without error. Any other failure propagates from the stage
        that raised it.

        Args:
            config: Parsed service configuration

        Returns:
            ReplicationOutcome describing what was configured
        """
        logger.info(f"{LOG_PREFIX} Starting setting up the S3 Replication")

        self._enter(ReplicationState.CHECK_EXISTENCE)
        if not all_buckets_exist(self.client, config.pairs):
            self._enter(ReplicationState.DONE)
            logger.info(f"{LOG_PREFIX} Finished S3 replication plugin")
            return ReplicationOutcome(ready=False)

        self._enter(ReplicationState.BUILD_PLAN)
        plan = build_replication_plan(config.pairs)

        self._enter(ReplicationState.PROVISION_ROLES)
        roles = RoleProvisioner(self.client, config.service_name).provision(plan)

        self._enter(ReplicationState.APPLY_REPLICATION)
        applied = ReplicationApplier(self.client).apply(plan, roles)

        self._enter(ReplicationState.DONE)
        logger.info(f"{LOG_PREFIX} Finished S3 replication plugin")

        return ReplicationOutcome(ready=True, plan=plan, roles=roles, applied=applied)


def run_replication_setup(
    config: ServiceConfig,
    client: Optional[AWSReplicationClient] = None,
) -> ReplicationOutcome:
    """
    Configure replication for a service once its deployment has succeeded.

    Args:
        config: Parsed service configuration
        client: AWSReplicationClient instance (a default one is created if omitted)

    Returns:
        ReplicationOutcome
    """
    if client is None:
        client = AWSReplicationClient()
    return S3TwoWayReplication(client).run(config)


def setup_from_config_file(
    config_path: str,
    region: Optional[str] = None,
    profile: Optional[str] = None,
) -> ReplicationOutcome:
    """
    Configure replication from a service definition file.

    Args:
        config_path: Path to the service definition (YAML or JSON)
        region: AWS region name
        profile: AWS CLI profile name

    Returns:
        ReplicationOutcome
    """
    client = AWSReplicationClient(region=region, profile=profile)
    config = load_config_from_file(config_path)
    return run_replication_setup(config, client)


def setup_from_env(
    region: Optional[str] = None,
    profile: Optional[str] = None,
) -> ReplicationOutcome:
    """
    Configure replication from environment variables.

    Environment variables:
        S3_REPLICATION_CONFIG: JSON service definition (optional)
        S3_REPLICATION_SERVICE_NAME: Service name (optional)
        S3_REPLICATION_PAIRS: Comma-separated replication pairs (optional)

    Returns:
        ReplicationOutcome
    """
    client = AWSReplicationClient(region=region, profile=profile)
    config = load_config_from_env()
    return run_replication_setup(config, client)
