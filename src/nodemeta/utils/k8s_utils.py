import re

# aws:///us-east-1a/i-0123456789abcdef0, or aws:///i-0123... for some providers
_AWS_PROVIDER_ID_RE = re.compile(r"^aws://(?:/[^/]*)*/(i-[0-9a-f]+)$")


def instance_id_from_provider_id(provider_id: str) -> str:
    """
    Extract the EC2 instance ID from a Kubernetes node.spec.providerID.

    Raises:
        ValueError: If the provider ID is not an AWS EC2 provider ID.
    """
    if not provider_id:
        raise ValueError("empty provider ID")

    match = _AWS_PROVIDER_ID_RE.match(provider_id.strip())
    if not match:
        raise ValueError(f"not an AWS EC2 provider ID: {provider_id!r}")
    return match.group(1)


def is_provider_id(value: str) -> bool:
    """Any value carrying a scheme is a provider ID; only aws:// ones resolve to an instance ID."""
    return "://" in value
