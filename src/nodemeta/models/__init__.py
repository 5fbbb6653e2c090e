from .instance import InstanceIdentityDocument, Tag

__all__ = ["InstanceIdentityDocument", "Tag"]
