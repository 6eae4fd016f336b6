"""
Duplicate Group Service — copies of boxes and services.

Duplicating from the all-warehouses view creates a duplicate group: one
custom copy per warehouse, all sharing a group id that is never reassigned.
Duplicating inside one warehouse creates an independent copy scoped to that
warehouse only.
"""

from dataclasses import dataclass, field

import structlog

from config.shipping import COPY_NAME_PREFIX, CUSTOM_ID_PREFIX, GROUP_ID_PREFIX
from models.shipping_resource import (
    PartitionScope,
    PartitionWrite,
    Resource,
    ResourceKind,
    ResourceOrigin,
)
from services.resource_identity import IdFactory, generate_id

logger = structlog.get_logger(__name__)


@dataclass
class DuplicateGroup:
    """Copies created by one all-warehouses duplication."""
    group_id: str
    source_id: str
    members: dict[str, Resource] = field(default_factory=dict)  # partition_id -> copy

    @property
    def partition_ids(self) -> list[str]:
        return list(self.members)


def _copy_fields(source: Resource) -> dict:
    """Fields every copy takes from its source."""
    needs_completion = (
        source.kind == ResourceKind.BOX
        and (source.dimensions is None or source.dimensions.is_zero)
    )
    name = source.name
    if len(COPY_NAME_PREFIX) + len(name) <= 255:
        name = f"{COPY_NAME_PREFIX}{name}"
    return {
        "origin": ResourceOrigin.CUSTOM,
        "name": name,
        "is_active": False,
        "is_editable": True,
        "needs_completion": needs_completion,
        "original_resource_id": source.id,
    }


def duplicate_across_partitions(
    source: Resource,
    partition_ids: list[str],
    id_factory: IdFactory = generate_id,
) -> DuplicateGroup:
    """
    Create one grouped copy of ``source`` in every warehouse.

    All copies share a fresh group id, start disabled, and carry the
    source's carrier identity, dimensions and weight.

    Args:
        source: Resource being duplicated (any origin)
        partition_ids: Warehouses that exist right now
        id_factory: Id generator for the group and the copies

    Returns:
        DuplicateGroup with one member per warehouse
    """
    group_id = id_factory(GROUP_ID_PREFIX)
    group = DuplicateGroup(group_id=group_id, source_id=source.id)

    base = _copy_fields(source)
    for partition_id in partition_ids:
        group.members[partition_id] = source.model_copy(update={
            **base,
            "id": id_factory(CUSTOM_ID_PREFIX),
            "partition_scope": PartitionScope.all_partitions(),
            "duplicate_group_id": group_id,
        })

    logger.info(
        "duplicate_group_created",
        group_id=group_id,
        source_id=source.id,
        kind=source.kind.value,
        partitions=len(group.members),
    )
    return group


def duplicate_within_partition(
    source: Resource,
    partition_id: str,
    id_factory: IdFactory = generate_id,
) -> Resource:
    """
    Create an independent copy of ``source`` in one warehouse.

    The copy has no group id and is scoped to ``partition_id``; nothing in
    other warehouses changes with it.
    """
    copy = source.model_copy(update={
        **_copy_fields(source),
        "id": id_factory(CUSTOM_ID_PREFIX),
        "partition_scope": PartitionScope.specific(partition_id),
        "duplicate_group_id": None,
    })
    logger.info(
        "resource_duplicated_in_partition",
        partition_id=partition_id,
        source_id=source.id,
        copy_id=copy.id,
    )
    return copy


def plan_additions(
    snapshot: dict[str, list[Resource]],
    additions: dict[str, Resource],
    kind: ResourceKind,
) -> list[PartitionWrite]:
    """
    Writes that append one new resource to each listed warehouse.

    Args:
        snapshot: Current resources by warehouse
        additions: partition_id -> resource to append
        kind: Resource kind of the snapshot
    """
    return [
        PartitionWrite(
            partition_id=partition_id,
            kind=kind,
            resources=[*snapshot.get(partition_id, []), resource],
        )
        for partition_id, resource in additions.items()
    ]
