#!/usr/bin/env python3
"""
Main entry point for the S3 two-way replication setup.

Run after a successful deployment to configure replication between the
bucket pairs declared in the service definition or environment variables.
"""

import argparse
import json
import logging
import sys

from s3_two_way_replication.aws_client import AWSReplicationClient
from s3_two_way_replication.config import load_config_from_env, load_config_from_file
from s3_two_way_replication.replication import S3TwoWayReplication

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Configure two-way replication between S3 bucket pairs"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to the service definition (YAML or JSON)",
    )
    parser.add_argument(
        "--region",
        "-r",
        help="AWS region for the API clients",
    )
    parser.add_argument(
        "--profile",
        "-p",
        help="AWS CLI profile to use",
    )
    parser.add_argument(
        "--output",
        "-o",
        choices=["json", "text"],
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        client = AWSReplicationClient(region=args.region, profile=args.profile)

        if args.config:
            config = load_config_from_file(args.config)
        else:
            config = load_config_from_env()

        outcome = S3TwoWayReplication(client).run(config)

        if args.output == "json":
            print(json.dumps(outcome.to_dict(), indent=2))
        else:
            print("\n=== Replication Setup Complete ===\n")

            if not outcome.ready:
                print("Not all buckets exist yet, nothing was configured")

            for bucket in outcome.to_dict()["buckets"]:
                status = "applied" if bucket["applied"] else "pending"
                print(f"  - {bucket['name']} ({bucket['region']}, {status})")
                print(f"    Role: {bucket['role']}")
                print(f"    Targets: {', '.join(bucket['targets'])}")

        logger.info("Replication setup completed successfully")

    except Exception as e:
        logger.error(f"Replication setup failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
