"""
Toggle Service — enable/disable a resource across warehouses.

Decision table:
    custom, scoped to one warehouse    flip in that warehouse only
    grouped duplicate                  consensus over the group members
    anything else                      consensus over every warehouse holding it

Consensus: if any holder is enabled, disable all; if none is, enable all.
Applying the result and toggling again flips back, so repeated toggles
oscillate between "enable all" and "disable all".
"""

from dataclasses import dataclass, field

import structlog

from exceptions import IncompleteResourceError, ResourceNotFoundError
from models.shipping_resource import PartitionWrite, Resource
from services.resource_identity import IdentityKey, find_match, key_of

logger = structlog.get_logger(__name__)


@dataclass
class ToggleResult:
    """Writes computed for one toggle."""
    target_state: bool
    writes: list[PartitionWrite] = field(default_factory=list)

    @property
    def partition_ids(self) -> list[str]:
        return [write.partition_id for write in self.writes]


def _set_active(
    resources: list[Resource],
    key: IdentityKey,
    is_active: bool,
) -> list[Resource]:
    """Copy of ``resources`` with every key match set to ``is_active``."""
    return [
        resource.model_copy(update={"is_active": is_active})
        if key_of(resource) == key else resource
        for resource in resources
    ]


def _holders(
    key: IdentityKey,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> dict[str, Resource]:
    """partition_id -> matching resource, for warehouses holding ``key``."""
    holders: dict[str, Resource] = {}
    for partition_id in partition_ids:
        match = find_match(snapshot.get(partition_id, []), key)
        if match is not None:
            holders[partition_id] = match
    return holders


def _check_can_enable(resource: Resource, holders: dict[str, Resource]) -> None:
    incomplete = [pid for pid, match in holders.items() if match.needs_completion]
    if incomplete:
        logger.warning(
            "toggle_blocked_incomplete",
            resource_id=resource.id,
            partition_ids=incomplete,
        )
        raise IncompleteResourceError(resource.id, incomplete)


def toggle_in_partition(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_id: str,
) -> ToggleResult:
    """
    Flip a resource in one warehouse.

    Raises:
        ResourceNotFoundError: If the warehouse does not hold the resource
        IncompleteResourceError: If enabling a resource that needs completion
    """
    key = key_of(resource)
    resources = snapshot.get(partition_id, [])
    match = find_match(resources, key)
    if match is None:
        raise ResourceNotFoundError(resource.id)

    target = not match.is_active
    if target:
        _check_can_enable(resource, {partition_id: match})

    logger.info(
        "resource_toggled_in_partition",
        partition_id=partition_id,
        resource_id=resource.id,
        is_active=target,
    )
    return ToggleResult(
        target_state=target,
        writes=[PartitionWrite(
            partition_id=partition_id,
            kind=resource.kind,
            resources=_set_active(resources, key, target),
        )],
    )


def toggle(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> ToggleResult:
    """
    Toggle a resource from the all-warehouses view.

    Args:
        resource: Resource as shown in the aggregate view
        snapshot: Current resources of its kind, by warehouse
        partition_ids: All warehouses, in display order

    Returns:
        ToggleResult with one write per warehouse holding the resource

    Raises:
        ResourceNotFoundError: If no warehouse holds the resource
        IncompleteResourceError: If enabling and any holder needs completion
    """
    scope = resource.partition_scope
    if not resource.is_provider and not resource.is_grouped and scope.is_specific:
        return toggle_in_partition(resource, snapshot, scope.partition_id)

    key = key_of(resource)
    holders = _holders(key, snapshot, partition_ids)
    if not holders:
        raise ResourceNotFoundError(resource.id)

    any_active = any(match.is_active for match in holders.values())
    target = not any_active
    if target:
        _check_can_enable(resource, holders)

    writes = [
        PartitionWrite(
            partition_id=partition_id,
            kind=resource.kind,
            resources=_set_active(snapshot[partition_id], key, target),
        )
        for partition_id in holders
    ]

    logger.info(
        "resource_toggled",
        resource_id=resource.id,
        grouped=resource.is_grouped,
        enabled_before=sum(1 for m in holders.values() if m.is_active),
        total=len(holders),
        is_active=target,
    )
    return ToggleResult(target_state=target, writes=writes)
