# src/nodemeta/core/factory.py
"""
Factory function to build a MetadataClient from the environment configuration.
"""

import logging
from typing import List, Optional

from ..clients.aws import (
    Opt,
    new,
    with_ec2_client,
    with_metadata,
    with_metadata_discovery,
    with_validate_credentials,
)
from ..clients.base import MetadataClient
from .config import Config
from .config import config as global_config
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def build_options(cfg: Config) -> List[Opt]:
    """
    Returns the configuration steps implied by ``cfg``, in the order they must run.

    Static EKS_* overrides replace metadata discovery entirely; the EC2 client
    always comes after the step that provides the region.

    Raises:
        ConfigurationError: If only some of the EKS_* overrides are set.
    """
    if cfg.has_partial_static_metadata:
        raise ConfigurationError(
            "reading static metadata: EKS_REGION, EKS_ACCOUNT_ID and EKS_CLUSTER_NAME must be set together or not at all"
        )

    opts: List[Opt] = []
    if cfg.has_static_metadata:
        logger.info("Using static metadata from EKS_ACCOUNT_ID, EKS_REGION and EKS_CLUSTER_NAME.")
        opts.append(with_metadata(cfg.EKS_ACCOUNT_ID, cfg.EKS_REGION, cfg.EKS_CLUSTER_NAME))
    else:
        logger.info("Discovering metadata from the instance metadata service at %s.", cfg.IMDS_ENDPOINT)
        opts.append(with_metadata_discovery(endpoint=cfg.IMDS_ENDPOINT))

    opts.append(with_ec2_client())
    if cfg.VALIDATE_CREDENTIALS:
        opts.append(with_validate_credentials())
    return opts


async def build_client(cfg: Optional[Config] = None, log: Optional[logging.Logger] = None) -> MetadataClient:
    """
    Builds a fully configured MetadataClient.

    Raises:
        ConfigurationError: If any configuration step fails.
    """
    cfg = cfg or global_config
    return await new(*build_options(cfg), log=log)
