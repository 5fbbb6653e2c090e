from .aws import (
    AWSClient,
    cluster_name_from_tags,
    new,
    with_ec2_client,
    with_metadata,
    with_metadata_discovery,
    with_validate_credentials,
)
from .base import MetadataClient
from .imds import InstanceMetadataService

__all__ = [
    "AWSClient",
    "InstanceMetadataService",
    "MetadataClient",
    "cluster_name_from_tags",
    "new",
    "with_ec2_client",
    "with_metadata",
    "with_metadata_discovery",
    "with_validate_credentials",
]
