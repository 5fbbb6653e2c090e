class NodeMetaError(Exception):
    """Base exception for nodemeta."""

    pass


class ConfigurationError(NodeMetaError):
    """Raised when a client configuration step fails."""

    pass


class MetadataServiceError(NodeMetaError):
    """Raised when the instance metadata service cannot be queried."""

    pass


class ComputeAPIError(NodeMetaError):
    """Raised when an EC2 describe call fails."""

    pass


class ClusterNameDiscoveryError(NodeMetaError):
    """Base exception for cluster name discovery failures."""

    def __init__(self, message: str, instance_id: str):
        super().__init__(message)
        self.instance_id = instance_id


class NoReservationsError(ClusterNameDiscoveryError):
    """Raised when DescribeInstances returns no reservations."""

    def __init__(self, instance_id: str):
        super().__init__(f"no reservations found for instance_id={instance_id}", instance_id)


class NoInstancesError(ClusterNameDiscoveryError):
    """Raised when the first reservation holds no instances."""

    def __init__(self, instance_id: str):
        super().__init__(f"no instances found for instance_id={instance_id}", instance_id)


class NoTagsError(ClusterNameDiscoveryError):
    """Raised when the instance carries no tags."""

    def __init__(self, instance_id: str):
        super().__init__(f"no tags found for instance_id={instance_id}", instance_id)


class ClusterTagNotFoundError(ClusterNameDiscoveryError):
    """Raised when none of the instance tags identifies a cluster."""

    def __init__(self, instance_id: str):
        super().__init__(
            f"discovering cluster name: instance cluster tags not found for instance_id={instance_id}",
            instance_id,
        )
