"""
All-warehouses view of a resource kind.

Warehouses are walked in the order supplied by the caller. The first
resource seen for an identity key represents it; every warehouse holding
the key contributes its active state under the representative's id.
Nothing here depends on dict or set iteration order, so the same input
always produces the same output.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from models.shipping_resource import (
    ActivationStatus,
    ActivationSummary,
    PartitionState,
    Resource,
)
from services.resource_identity import IdentityKey, carrier_of, find_match, key_of

logger = structlog.get_logger(__name__)


@dataclass
class AggregateResult:
    """Deduplicated resources plus their per-warehouse states."""
    resources: list[Resource] = field(default_factory=list)
    states_by_resource_id: dict[str, list[PartitionState]] = field(default_factory=dict)
    summaries: dict[str, ActivationSummary] = field(default_factory=dict)

    def get(self, resource_id: str) -> Optional[Resource]:
        """Representative with the given id, if any."""
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None


def summarize(states: list[PartitionState]) -> ActivationSummary:
    """
    Derive the aggregate state from per-warehouse states.

    Returns:
        ALL_ENABLED, ALL_DISABLED, or PARTIAL(enabled_count, total)
    """
    total = len(states)
    enabled = sum(1 for state in states if state.is_active)

    if total > 0 and enabled == total:
        status = ActivationStatus.ALL_ENABLED
    elif enabled == 0:
        status = ActivationStatus.ALL_DISABLED
    else:
        status = ActivationStatus.PARTIAL

    return ActivationSummary(status=status, enabled_count=enabled, total=total)


def build_aggregate(
    resources_by_partition: dict[str, list[Resource]],
    partition_ids: list[str],
) -> AggregateResult:
    """
    Build the deduplicated all-warehouses list.

    Args:
        resources_by_partition: Resources of one kind, by warehouse
        partition_ids: Warehouse order; decides which copy represents a key

    Returns:
        AggregateResult with representatives in first-seen order
    """
    result = AggregateResult()
    representative_by_key: dict[IdentityKey, Resource] = {}

    for partition_id in partition_ids:
        for resource in resources_by_partition.get(partition_id, []):
            key = key_of(resource)
            representative = representative_by_key.get(key)

            if representative is None:
                representative = resource
                representative_by_key[key] = resource
                result.resources.append(resource)
                result.states_by_resource_id[resource.id] = []

            states = result.states_by_resource_id[representative.id]
            # A key counts once per warehouse
            if any(state.partition_id == partition_id for state in states):
                continue
            states.append(PartitionState(partition_id=partition_id, is_active=resource.is_active))

    for resource in result.resources:
        states = result.states_by_resource_id[resource.id]
        if resource.partition_scope.is_specific and resource.partition_scope.partition_id:
            # Only the owning warehouse counts
            owned = [s for s in states if s.partition_id == resource.partition_scope.partition_id]
            result.summaries[resource.id] = summarize(owned or states)
        else:
            result.summaries[resource.id] = summarize(states)

    logger.debug(
        "aggregate_built",
        partitions=len(partition_ids),
        resources=len(result.resources),
    )
    return result


def partition_states(
    resource: Resource,
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
) -> list[PartitionState]:
    """States of ``resource`` in every warehouse that holds it."""
    key = key_of(resource)
    states: list[PartitionState] = []
    for partition_id in partition_ids:
        match = find_match(snapshot.get(partition_id, []), key)
        if match is not None:
            states.append(PartitionState(partition_id=partition_id, is_active=match.is_active))
    return states


def filter_by_carriers(
    resources: list[Resource],
    enabled_carriers: Optional[Iterable[str]],
) -> list[Resource]:
    """
    Hide resources of carriers that are not enabled.

    Resources without a carrier identity always show. None disables
    filtering.
    """
    if enabled_carriers is None:
        return list(resources)
    carriers = {carrier.upper() for carrier in enabled_carriers}
    return [
        resource for resource in resources
        if carrier_of(resource) is None or carrier_of(resource).upper() in carriers
    ]
