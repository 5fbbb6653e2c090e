# src/nodemeta/clients/base.py
"""
This module defines the abstract interface for node metadata clients.
Callers depend on this interface rather than on a concrete SDK-backed
implementation, so tests can substitute a stub or an AsyncMock built with
``spec=MetadataClient``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence


class MetadataClient(ABC):
    """
    Abstract Base Class for cloud metadata clients.
    """

    @abstractmethod
    async def get_region(self) -> str:
        """
        Returns the region of the current instance. Either set statically at
        construction, or discovered from the instance metadata service.
        """
        pass

    @abstractmethod
    async def get_account_id(self) -> str:
        """
        Returns the account ID owning the current instance.
        """
        pass

    @abstractmethod
    async def get_cluster_name(self) -> str:
        """
        Returns the Kubernetes cluster name the current instance belongs to,
        discovered from the instance tags when not set statically.
        """
        pass

    @abstractmethod
    async def get_instances_by_instance_ids(self, instance_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Returns the instance descriptors matching the given instance IDs, which
        can be retrieved from ``node.spec.providerID``.
        """
        pass

    async def close(self):
        """
        Clean up resources (e.g., close HTTP sessions).
        """
        pass
