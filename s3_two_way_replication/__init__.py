"""
S3 Two-Way Replication - A Python package for configuring bidirectional
replication between pairs of S3 buckets after a deployment.

This package provides utilities for:
- Reading replication pairs from a declarative service definition
- Checking that every referenced bucket exists
- Provisioning the IAM role and policy S3 replication needs
- Applying replication rules to each main bucket
"""

__version__ = "0.1.0"

LOG_PREFIX = "S3-TWO-WAY-REPLICATION-PLUGIN"
TAG = "S3-TWO-WAY-REPLICATION-PLUGIN"
