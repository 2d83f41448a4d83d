"""
Deployment lifecycle hook.

Deployment tooling calls ``after_deploy`` once a deployment has succeeded.
"""

import os
from collections.abc import Mapping
from typing import Any, Optional, Union

from .aws_client import AWSReplicationClient
from .config import ServiceConfig, load_config_from_file, parse_config
from .replication import ReplicationOutcome, run_replication_setup


def after_deploy(
    service_definition: Union[ServiceConfig, Mapping[str, Any], str, os.PathLike],
    client: Optional[AWSReplicationClient] = None,
) -> ReplicationOutcome:
    """
    Configure bucket replication after a successful deployment.

    Args:
        service_definition: A parsed ServiceConfig, a raw service definition
            dictionary, or the path of a service definition file
        client: AWSReplicationClient instance (optional)

    Returns:
        ReplicationOutcome
    """
    if isinstance(service_definition, ServiceConfig):
        config = service_definition
    elif isinstance(service_definition, Mapping):
        config = parse_config(dict(service_definition))
    else:
        config = load_config_from_file(os.fspath(service_definition))

    return run_replication_setup(config, client)
