"""
Resource identity: the single matching rule for shipping resources.

Sync, aggregation, toggling, duplication and deletion all match resources
across warehouses by the key computed here and nothing else.

Keys:
    grouped duplicate   ("group", duplicate_group_id)
    other custom        ("custom", id)
    provider            (kind, carrier_code, sub_class, package_code)

Custom resources never use the carrier key, even when they were duplicated
from a carrier resource: a single-warehouse copy would otherwise be folded
into the resource it was copied from.
"""

from typing import Callable, Optional
from uuid import uuid4

from models.shipping_resource import (
    CarrierIdentity,
    ProviderItem,
    Resource,
    ResourceKind,
    ResourceOrigin,
)

IdentityKey = tuple[str, ...]
IdFactory = Callable[[str], str]

GROUP_KEY = "group"
CUSTOM_KEY = "custom"


def carrier_key(kind: ResourceKind, carrier: CarrierIdentity) -> IdentityKey:
    """Key of a carrier catalog entry of the given kind."""
    return (kind.value, carrier.carrier_code, carrier.sub_class, carrier.package_code)


def key_of(resource: Resource) -> IdentityKey:
    """
    Compute the identity key of a resource.

    Args:
        resource: Any resource

    Returns:
        Tuple key; equal keys mean "the same resource" across warehouses
    """
    if resource.duplicate_group_id is not None:
        return (GROUP_KEY, resource.duplicate_group_id)

    if resource.origin == ResourceOrigin.CUSTOM or resource.carrier is None:
        return (CUSTOM_KEY, resource.id)

    return carrier_key(resource.kind, resource.carrier)


def catalog_key(item: ProviderItem) -> IdentityKey:
    """Key the provider resource built from ``item`` will have."""
    return carrier_key(item.kind, item.carrier)


def identity_label(key: IdentityKey) -> str:
    """Readable form of a key for events and logs."""
    return ":".join(part for part in key if part)


def carrier_of(resource: Resource) -> Optional[str]:
    """Carrier a resource belongs to, if any."""
    return resource.carrier.carrier_code if resource.carrier else None


def find_match(resources: list[Resource], key: IdentityKey) -> Optional[Resource]:
    """First resource in ``resources`` with identity ``key``."""
    for resource in resources:
        if key_of(resource) == key:
            return resource
    return None


def generate_id(prefix: str) -> str:
    """Fresh resource or group id, e.g. ``custom-3f2a...``."""
    return f"{prefix}-{uuid4().hex}"
