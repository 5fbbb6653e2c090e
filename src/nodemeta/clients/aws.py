# src/nodemeta/clients/aws.py
"""
AWS implementation of the MetadataClient interface.

The client is assembled by ``new()`` from an ordered list of configuration
steps. Each step receives the in-progress client and may raise to abort
construction; steps after a failing one never run.

    client = await new(with_metadata_discovery(), with_ec2_client(), with_validate_credentials())
    region = await client.get_region()
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

import boto3
import httpx
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from pydantic import ValidationError

from ..core.config import config
from ..core.exceptions import (
    ClusterTagNotFoundError,
    ComputeAPIError,
    ConfigurationError,
    MetadataServiceError,
    NoInstancesError,
    NoReservationsError,
    NoTagsError,
)
from ..models.instance import Tag
from .base import MetadataClient
from .imds import InstanceMetadataService

logger = logging.getLogger(__name__)

TAG_EKS_K8S_CLUSTER = "k8s.io/cluster/"
TAG_EKS_KUBERNETES_CLUSTER = "kubernetes.io/cluster/"
TAG_KOPS_KUBERNETES_CLUSTER = "KubernetesCluster"
OWNED = "owned"

EKS_CLUSTER_TAGS = (TAG_EKS_K8S_CLUSTER, TAG_EKS_KUBERNETES_CLUSTER)

# Maximum number of instance IDs sent in a single DescribeInstances filter.
BATCH_SIZE = 20

Opt = Callable[["AWSClient"], Awaitable[None]]


async def new(*opts: Opt, log: Optional[logging.Logger] = None) -> MetadataClient:
    """
    Creates and configures a new AWS client by applying ``opts`` in order.

    Raises:
        The first exception raised by a configuration step, unchanged.
    """
    client = AWSClient(log=log)

    for opt in opts:
        await opt(client)

    return client


def with_ec2_client() -> Opt:
    """
    Configures the EC2 SDK client. The region must already be discovered or
    set statically by an earlier step.
    """

    async def opt(c: "AWSClient") -> None:
        if not c.region:
            raise ConfigurationError("creating aws sdk session: region is not configured")

        try:
            session = boto3.Session(region_name=c.region)
            ec2_client = session.client(
                "ec2",
                config=BotoConfig(retries={"max_attempts": config.EC2_MAX_ATTEMPTS, "mode": "standard"}),
            )
        except BotoCoreError as e:
            raise ConfigurationError(f"creating aws sdk session: {e}") from e

        c.session = session
        c.ec2_client = ec2_client
        c.log.debug("Configured EC2 client for region %s", c.region)

    return opt


def _resolve_credentials(session: boto3.Session):
    credentials = session.get_credentials()
    if credentials is None:
        raise NoCredentialsError()
    return credentials.get_frozen_credentials()


def with_validate_credentials() -> Opt:
    """
    Resolves the session credential chain once, so invalid or unreachable
    credentials fail construction instead of the first EC2 call.
    """

    async def opt(c: "AWSClient") -> None:
        if c.session is None:
            raise ConfigurationError("validating aws credentials: no aws sdk session configured")

        try:
            await asyncio.to_thread(_resolve_credentials, c.session)
        except (BotoCoreError, ClientError) as e:
            raise ConfigurationError(f"validating aws credentials: {e}") from e

        c.log.debug("Validated aws credentials.")

    return opt


def with_metadata(account_id: str, region: str, cluster_name: str) -> Opt:
    """
    Sets the account ID, region and cluster name statically instead of
    relying on discovery.
    """

    async def opt(c: "AWSClient") -> None:
        c.account_id = account_id
        c.region = region
        c.cluster_name = cluster_name

    return opt


def with_metadata_discovery(endpoint: Optional[str] = None) -> Opt:
    """
    Configures the instance metadata client and discovers the region
    immediately. Account ID and cluster name are discovered on first use.
    """

    async def opt(c: "AWSClient") -> None:
        try:
            metadata = InstanceMetadataService(endpoint=endpoint)
        except (httpx.InvalidURL, ValueError) as e:
            raise ConfigurationError(f"creating metadata session: {e}") from e

        try:
            region = await metadata.get_region()
        except MetadataServiceError as e:
            await metadata.close()
            raise ConfigurationError(f"getting instance region: {e}") from e

        c.metadata = metadata
        c.region = region
        c.log.info("Discovered instance region: %s", region)

    return opt


def _parse_tags(raw_tags: Iterable[Dict[str, Any]]) -> List[Tag]:
    tags = []
    for raw in raw_tags:
        try:
            tags.append(Tag.model_validate(raw))
        except ValidationError:
            continue
    return tags


def cluster_name_from_tags(tags: Iterable[Tag]) -> str:
    """
    Returns the cluster name advertised by the first matching tag, or an empty
    string when no tag matches.

    A tag matches when its key starts with an EKS cluster prefix and its value
    is ``owned`` (the name is the key suffix), or when its key is the kOps
    ``KubernetesCluster`` key (the name is the value).
    """
    for tag in tags:
        for prefix in EKS_CLUSTER_TAGS:
            if tag.key.startswith(prefix) and tag.value == OWNED:
                return tag.key[len(prefix) :]
        if tag.key == TAG_KOPS_KUBERNETES_CLUSTER:
            return tag.value
    return ""


class AWSClient(MetadataClient):
    """MetadataClient backed by the instance metadata service and the EC2 API."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.session: Optional[boto3.Session] = None
        self.ec2_client = None
        self.metadata: Optional[InstanceMetadataService] = None

        self.region: Optional[str] = None
        self.account_id: Optional[str] = None
        self.cluster_name: Optional[str] = None

        # One lock per lazily discovered field, so concurrent first calls hit
        # the remote services once without blocking unrelated lookups.
        self._region_lock = asyncio.Lock()
        self._account_id_lock = asyncio.Lock()
        self._cluster_name_lock = asyncio.Lock()

    def _require_metadata(self) -> InstanceMetadataService:
        if self.metadata is None:
            raise ConfigurationError("metadata discovery is not configured; use with_metadata_discovery()")
        return self.metadata

    def _require_ec2(self):
        if self.ec2_client is None:
            raise ConfigurationError("EC2 client is not configured; use with_ec2_client()")
        return self.ec2_client

    async def _describe_instances(self, **kwargs) -> Dict[str, Any]:
        ec2_client = self._require_ec2()
        self.log.debug("DescribeInstances %s", kwargs)
        return await asyncio.to_thread(ec2_client.describe_instances, **kwargs)

    async def get_region(self) -> str:
        if self.region is not None:
            return self.region

        async with self._region_lock:
            if self.region is None:
                self.region = await self._require_metadata().get_region()
                self.log.info("Discovered instance region: %s", self.region)

        return self.region

    async def get_account_id(self) -> str:
        if self.account_id is not None:
            return self.account_id

        async with self._account_id_lock:
            if self.account_id is None:
                document = await self._require_metadata().get_instance_identity_document()
                self.account_id = document.account_id
                self.log.info("Discovered instance account ID: %s", self.account_id)

        return self.account_id

    async def get_cluster_name(self) -> str:
        if self.cluster_name is not None:
            return self.cluster_name

        async with self._cluster_name_lock:
            if self.cluster_name is None:
                self.cluster_name = await self._discover_cluster_name()
                self.log.info("Discovered cluster name: %s", self.cluster_name)

        return self.cluster_name

    async def _discover_cluster_name(self) -> str:
        metadata = self._require_metadata()
        try:
            instance_id = await metadata.get_metadata("instance-id")
        except MetadataServiceError as e:
            raise MetadataServiceError(f"getting instance id from metadata: {e}") from e

        try:
            resp = await self._describe_instances(InstanceIds=[instance_id])
        except (BotoCoreError, ClientError) as e:
            raise ComputeAPIError(f"describing instance_id={instance_id}: {e}") from e

        reservations = resp.get("Reservations") or []
        if not reservations:
            raise NoReservationsError(instance_id)

        instances = reservations[0].get("Instances") or []
        if not instances:
            raise NoInstancesError(instance_id)

        raw_tags = instances[0].get("Tags") or []
        if not raw_tags:
            raise NoTagsError(instance_id)

        cluster_name = cluster_name_from_tags(_parse_tags(raw_tags))
        if not cluster_name:
            raise ClusterTagNotFoundError(instance_id)

        return cluster_name

    async def get_instances_by_instance_ids(self, instance_ids: Sequence[str]) -> List[Dict[str, Any]]:
        instances: List[Dict[str, Any]] = []
        ids = list(instance_ids)

        for i in range(0, len(ids), BATCH_SIZE):
            batch = ids[i : i + BATCH_SIZE]
            self.log.debug(
                "Describing instances %d-%d of %d",
                i + 1,
                i + len(batch),
                len(ids),
            )

            try:
                resp = await self._describe_instances(Filters=[{"Name": "instance-id", "Values": batch}])
            except (BotoCoreError, ClientError) as e:
                raise ComputeAPIError(f"describing instances: {e}") from e

            for reservation in resp.get("Reservations") or []:
                instances.extend(reservation.get("Instances") or [])

        return instances

    async def close(self):
        """Close the metadata service http client if it exists."""
        if self.metadata is not None:
            await self.metadata.close()
            self.metadata = None
