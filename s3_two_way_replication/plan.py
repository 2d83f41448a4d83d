"""
Replication Plan

Turns the configured bucket pairs into one replication plan entry per main
bucket. Building the plan is purely in-memory; nothing here talks to AWS.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from . import LOG_PREFIX
from .config import BucketRef, ReplicationPairConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplicationRule:
    """A single S3 replication rule targeting one destination bucket."""

    destination_bucket_arn: str
    priority: int
    status: str = "Enabled"
    prefix_filter: str = ""
    delete_marker_replication: str = "Enabled"

    def to_dict(self) -> Dict[str, Any]:
        """Render the rule in the shape expected by PutBucketReplication."""
        return {
            "Destination": {"Bucket": self.destination_bucket_arn},
            "Status": self.status,
            "Priority": self.priority,
            "Filter": {"Prefix": self.prefix_filter},
            "DeleteMarkerReplication": {"Status": self.delete_marker_replication},
        }


@dataclass(frozen=True)
class ReplicationPlanEntry:
    """Accumulated replication rules for one main bucket."""

    main_bucket: str
    region: str
    rules: Tuple[ReplicationRule, ...] = ()
    target_buckets: Tuple[BucketRef, ...] = ()


@dataclass(frozen=True)
class ReplicationPlan:
    """Plan entries ordered by first appearance of their main bucket."""

    entries: Tuple[ReplicationPlanEntry, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[ReplicationPlanEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, main_bucket: str) -> Optional[ReplicationPlanEntry]:
        for entry in self.entries:
            if entry.main_bucket == main_bucket:
                return entry
        return None

    def bucket_names(self) -> List[str]:
        return [entry.main_bucket for entry in self.entries]


def build_replication_plan(pairs: Iterable[ReplicationPairConfig]) -> ReplicationPlan:
    """
    Build the replication plan for the configured pairs.

    Each pair adds one rule to its main bucket's entry, with a priority equal
    to the number of rules already in that entry. A pair repeating a target
    already present for the same main bucket adds nothing.

    Args:
        pairs: Replication pairs in configuration order

    Returns:
        ReplicationPlan with one entry per distinct main bucket
    """
    logger.info(f"{LOG_PREFIX} Starting setup of bidirectional replication buckets")

    regions: Dict[str, str] = {}
    rules: Dict[str, List[ReplicationRule]] = {}
    targets: Dict[str, List[BucketRef]] = {}

    for pair in pairs:
        main = pair.main_bucket.name
        target = pair.replication_bucket

        if main not in regions:
            regions[main] = pair.main_bucket.region
            rules[main] = []
            targets[main] = []

        if any(existing.name == target.name for existing in targets[main]):
            logger.debug(
                f"{LOG_PREFIX} Skipping duplicate replication rule between {main} and {target.name}"
            )
            continue

        rules[main].append(
            ReplicationRule(destination_bucket_arn=target.arn, priority=len(rules[main]))
        )
        targets[main].append(target)
        logger.info(
            f"{LOG_PREFIX} Creating replication rule between {main} and {target.name}"
        )

    return ReplicationPlan(
        entries=tuple(
            ReplicationPlanEntry(
                main_bucket=main,
                region=region,
                rules=tuple(rules[main]),
                target_buckets=tuple(targets[main]),
            )
            for main, region in regions.items()
        )
    )
