"""
Resource Edit Service — user-created resources and user edits.

Creating from the all-warehouses view adds the same custom resource (same
id) to every warehouse; creating inside a warehouse scopes it there.
Edits never change kind, origin, carrier identity, scope or group id, so a
duplicate group stays a group for its whole life.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from config.shipping import CUSTOM_ID_PREFIX
from exceptions import IncompleteResourceError, ResourceNotFoundError
from models.shipping_resource import (
    PartitionScope,
    PartitionWrite,
    Resource,
    ResourceCreate,
    ResourceKind,
    ResourceOrigin,
    ResourceUpdate,
)
from services.resource_identity import IdFactory, find_match, generate_id, key_of

logger = structlog.get_logger(__name__)


@dataclass
class EditResult:
    """Writes computed for one create or edit."""
    resource: Resource
    writes: list[PartitionWrite] = field(default_factory=list)

    @property
    def partition_ids(self) -> list[str]:
        return [write.partition_id for write in self.writes]


def create_custom(
    payload: ResourceCreate,
    kind: ResourceKind,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
    id_factory: IdFactory = generate_id,
) -> EditResult:
    """
    Create a custom resource in one warehouse or in all of them.

    Boxes without complete dimensions are created disabled and flagged as
    needing completion.
    """
    needs_completion = kind == ResourceKind.BOX and not (
        payload.dimensions is not None and payload.dimensions.is_complete
    )

    if payload.warehouse_id:
        scope = PartitionScope.specific(payload.warehouse_id)
        targets = [payload.warehouse_id]
    else:
        scope = PartitionScope.all_partitions()
        targets = list(partition_ids)

    resource = Resource(
        id=id_factory(CUSTOM_ID_PREFIX),
        kind=kind,
        origin=ResourceOrigin.CUSTOM,
        name=payload.name,
        description=payload.description,
        carrier=payload.carrier,
        dimensions=payload.dimensions,
        weight=payload.weight,
        cost=payload.cost,
        available_for=payload.available_for,
        service_type=payload.service_type,
        estimated_days=payload.estimated_days,
        is_active=payload.is_active and not needs_completion,
        is_editable=True,
        needs_completion=needs_completion,
        partition_scope=scope,
    )

    writes = [
        PartitionWrite(
            partition_id=partition_id,
            kind=kind,
            resources=[*snapshot.get(partition_id, []), resource],
        )
        for partition_id in targets
    ]

    logger.info(
        "custom_resource_created",
        resource_id=resource.id,
        kind=kind.value,
        partitions=len(writes),
    )
    return EditResult(resource=resource, writes=writes)


def _edited(match: Resource, edit: ResourceUpdate) -> Resource:
    """Apply ``edit`` to one warehouse's copy of the resource."""
    update: dict[str, Any] = {}

    if not match.is_provider:
        if edit.name is not None:
            update["name"] = edit.name
        if edit.description is not None:
            update["description"] = edit.description
        if edit.available_for is not None:
            update["available_for"] = edit.available_for

    if edit.cost is not None:
        update["cost"] = edit.cost
    if edit.tare_weight is not None and match.weight is not None:
        update["weight"] = match.weight.model_copy(update={"tare_weight": edit.tare_weight})

    needs_completion = match.needs_completion
    is_active = match.is_active

    dimensions_editable = match.is_editable or not match.is_provider
    if edit.dimensions is not None and dimensions_editable:
        update["dimensions"] = edit.dimensions
        needs_completion = match.kind == ResourceKind.BOX and not edit.dimensions.is_complete
        # Completing an editable box switches it on
        if not needs_completion and match.is_editable and not match.is_active:
            is_active = True

    if edit.is_active is not None:
        is_active = edit.is_active
    if needs_completion:
        is_active = False

    update["needs_completion"] = needs_completion
    update["is_active"] = is_active
    return match.model_copy(update=update)


def apply_edit(
    resource: Resource,
    edit: ResourceUpdate,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> EditResult:
    """
    Edit a resource in one warehouse or in every warehouse holding it.

    Args:
        resource: Resource being edited
        edit: Fields to change
        snapshot: Current resources of its kind, by warehouse
        partition_ids: All warehouses

    Raises:
        ResourceNotFoundError: If no targeted warehouse holds it
        IncompleteResourceError: If enabling a box that still needs dimensions
    """
    if edit.warehouse_id:
        targets = [edit.warehouse_id]
    elif resource.partition_scope.is_specific and not resource.is_grouped:
        targets = [resource.partition_scope.partition_id]
    else:
        targets = list(partition_ids)

    key = key_of(resource)
    writes: list[PartitionWrite] = []
    edited: Optional[Resource] = None

    for partition_id in targets:
        resources = snapshot.get(partition_id, [])
        match = find_match(resources, key)
        if match is None:
            continue

        updated = _edited(match, edit)
        if edit.is_active and updated.needs_completion:
            raise IncompleteResourceError(resource.id, [partition_id])

        edited = edited or updated
        writes.append(PartitionWrite(
            partition_id=partition_id,
            kind=resource.kind,
            resources=[updated if r is match else r for r in resources],
        ))

    if edited is None:
        raise ResourceNotFoundError(resource.id)

    logger.info(
        "resource_edited",
        resource_id=resource.id,
        partitions=len(writes),
        fields=sorted(edit.model_dump(exclude_none=True, exclude={"warehouse_id"})),
    )
    return EditResult(resource=edited, writes=writes)
