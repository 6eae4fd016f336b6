"""
Deletion of custom resources from warehouses.

Carrier resources are never deleted, only disabled.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from exceptions import NotDeletableError, ResourceNotFoundError
from models.shipping_resource import PartitionWrite, Resource
from services.resource_identity import IdentityKey, find_match, key_of

logger = structlog.get_logger(__name__)


@dataclass
class DeleteResult:
    """Writes computed for one delete."""
    writes: list[PartitionWrite] = field(default_factory=list)

    @property
    def partition_ids(self) -> list[str]:
        return [write.partition_id for write in self.writes]


def _without(resources: list[Resource], key: IdentityKey) -> list[Resource]:
    return [resource for resource in resources if key_of(resource) != key]


def _check_deletable(resource: Resource) -> None:
    if resource.is_provider:
        logger.warning("delete_rejected_provider_resource", resource_id=resource.id)
        raise NotDeletableError(resource.id)


def _removal_writes(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> DeleteResult:
    key = key_of(resource)
    result = DeleteResult()
    for partition_id in partition_ids:
        resources = snapshot.get(partition_id, [])
        if find_match(resources, key) is None:
            continue
        result.writes.append(PartitionWrite(
            partition_id=partition_id,
            kind=resource.kind,
            resources=_without(resources, key),
        ))

    if not result.writes:
        raise ResourceNotFoundError(resource.id)
    return result


def delete_in_partition(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_id: str,
    partition_ids: Optional[list[str]] = None,
) -> DeleteResult:
    """
    Remove a resource from one warehouse.

    A grouped duplicate has fixed membership, so deleting it from any
    warehouse removes the whole group from ``partition_ids`` (every
    warehouse in the snapshot when omitted).

    Raises:
        NotDeletableError: If the resource is carrier-provided
        ResourceNotFoundError: If the warehouse does not hold it
    """
    _check_deletable(resource)

    if find_match(snapshot.get(partition_id, []), key_of(resource)) is None:
        raise ResourceNotFoundError(resource.id)

    if resource.is_grouped:
        targets = partition_ids if partition_ids is not None else list(snapshot)
    else:
        targets = [partition_id]

    result = _removal_writes(resource, snapshot, targets)
    logger.info(
        "resource_deleted_in_partition",
        partition_id=partition_id,
        resource_id=resource.id,
        grouped=resource.is_grouped,
        partition_ids=result.partition_ids,
    )
    return result


def delete(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> DeleteResult:
    """
    Delete a resource from the all-warehouses view.

    Grouped duplicates are removed from every warehouse holding a group
    member, warehouse-scoped customs from their warehouse only, and other
    customs from every warehouse holding them.

    Raises:
        NotDeletableError: If the resource is carrier-provided
        ResourceNotFoundError: If no warehouse holds it
    """
    _check_deletable(resource)

    scope = resource.partition_scope
    if not resource.is_grouped and scope.is_specific:
        targets = [scope.partition_id]
    else:
        targets = partition_ids

    result = _removal_writes(resource, snapshot, targets)
    logger.info(
        "resource_deleted",
        resource_id=resource.id,
        grouped=resource.is_grouped,
        partition_ids=result.partition_ids,
    )
    return result
