"""
Replication Configuration

Reads the two-way replication pairs and the service name from a service
definition, either a YAML/JSON file or environment variables.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

import yaml

from . import LOG_PREFIX
from .aws_client import S3_ARN_PREFIX

logger = logging.getLogger(__name__)

PLUGIN_SECTION = "s3TwoWayReplicationPlugin"


@dataclass(frozen=True)
class BucketRef:
    """A bucket name together with the region it lives in."""

    region: str
    name: str

    @property
    def arn(self) -> str:
        return f"{S3_ARN_PREFIX}{self.name}"

    def to_mapping(self) -> Dict[str, str]:
        return {self.region: self.name}


@dataclass(frozen=True)
class ReplicationPairConfig:
    """A main bucket and the bucket it replicates into."""

    main_bucket: BucketRef
    replication_bucket: BucketRef


@dataclass
class ServiceConfig:
    """Replication settings of one deployed service."""

    service_name: str
    pairs: List[ReplicationPairConfig] = field(default_factory=list)


def parse_bucket_ref(data: Mapping[str, Any]) -> BucketRef:
    """
    Parse a single-entry ``{region: bucket_name}`` mapping.

    Args:
        data: Mapping with exactly one region key

    Returns:
        BucketRef for the entry

    Raises:
        ValueError: If the mapping does not hold exactly one region/name pair
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        raise ValueError(
            f"Bucket configuration must be a single '<region>: <bucketName>' entry, got {data!r}"
        )

    region, name = next(iter(data.items()))
    if not isinstance(region, str) or not isinstance(name, str) or not region or not name:
        raise ValueError(f"Invalid bucket configuration {data!r}")

    return BucketRef(region=region, name=name)


def parse_service_name(data: Dict[str, Any]) -> str:
    service = data.get("service")
    if isinstance(service, Mapping):
        service = service.get("name")
    if not service:
        raise ValueError("Service definition has no service name")
    return str(service)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Section {key!r} must be a mapping, got {section!r}")
    return section


def parse_config(data: Dict[str, Any]) -> ServiceConfig:
    """
    Parse a service definition dictionary into a ServiceConfig object.

    Args:
        data: Service definition dictionary

    Returns:
        ServiceConfig object
    """
    service_name = parse_service_name(data)

    custom = _section(data, "custom")
    plugin_config = _section(custom, PLUGIN_SECTION)
    pair_data = plugin_config.get("twoWayReplication") or []

    if not pair_data:
        logger.info(f"{LOG_PREFIX} No two-way replication configured for {service_name}")

    pairs = []
    for entry in pair_data:
        try:
            main_bucket = entry["mainBucket"]
            replication_bucket = entry["replicationBucket"]
        except (KeyError, TypeError):
            raise ValueError(
                f"Replication entry {entry!r} needs both mainBucket and replicationBucket"
            ) from None

        pairs.append(
            ReplicationPairConfig(
                main_bucket=parse_bucket_ref(main_bucket),
                replication_bucket=parse_bucket_ref(replication_bucket),
            )
        )

    return ServiceConfig(service_name=service_name, pairs=pairs)


def load_config_from_file(config_path: str) -> ServiceConfig:
    """
    Load the service definition from a YAML or JSON file.

    Args:
        config_path: Path to the service definition

    Returns:
        Parsed ServiceConfig object
    """
    with open(config_path, "r") as f:
        if config_path.endswith((".yml", ".yaml")):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return parse_config(data or {})


def load_config_from_env() -> ServiceConfig:
    """
    Load the service definition from environment variables.

    Environment variables:
        S3_REPLICATION_CONFIG: JSON string with the full service definition
        S3_REPLICATION_SERVICE_NAME: Service name
        S3_REPLICATION_PAIRS: Comma-separated pairs, each written as
            mainRegion:mainBucket=replicationRegion:replicationBucket

    Returns:
        Parsed ServiceConfig object
    """
    config_json = os.environ.get("S3_REPLICATION_CONFIG")
    if config_json:
        return parse_config(json.loads(config_json))

    pairs = []
    for item in os.environ.get("S3_REPLICATION_PAIRS", "").split(","):
        item = item.strip()
        if not item:
            continue
        main, sep, replication = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid replication pair {item!r}, expected main=replication")
        pairs.append(
            {
                "mainBucket": _parse_env_bucket(main),
                "replicationBucket": _parse_env_bucket(replication),
            }
        )

    return parse_config(
        {
            "service": os.environ.get("S3_REPLICATION_SERVICE_NAME"),
            "custom": {PLUGIN_SECTION: {"twoWayReplication": pairs}},
        }
    )


def _parse_env_bucket(value: str) -> Dict[str, str]:
    region, sep, name = value.strip().partition(":")
    if not sep:
        raise ValueError(f"Invalid bucket {value!r}, expected region:bucketName")
    return {region: name}
