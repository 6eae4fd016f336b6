"""
Catalog Merger — merges a carrier catalog into a warehouse's resources.

A sync replaces the carrier-owned part of each provider resource while
keeping everything the user invested in:
    - custom resources are never touched
    - is_active, tare weight and cost survive every sync
    - editable boxes keep user-set dimensions
    - editable provider boxes the carrier stopped listing are retained

Merging is pure: inputs are never mutated and the same catalog applied to
the merged result returns it unchanged.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from config.shipping import PROVIDER_ID_PREFIX
from models.shipping_resource import (
    PartitionWrite,
    ProviderItem,
    Resource,
    ResourceKind,
    ResourceOrigin,
    WeightLimits,
)
from services.resource_identity import (
    IdFactory,
    IdentityKey,
    carrier_of,
    catalog_key,
    generate_id,
    key_of,
)

logger = structlog.get_logger(__name__)


# ===================
# DATA CLASSES
# ===================

@dataclass
class MergeResult:
    """Result of merging a catalog into one warehouse."""
    partition_id: str
    resources: list[Resource] = field(default_factory=list)

    # Resource ids by outcome
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    retained: list[str] = field(default_factory=list)  # Custom, orphaned editable, other carriers
    dropped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.dropped)


# ===================
# HELPERS
# ===================

def dedupe_catalog(catalog: Iterable[ProviderItem]) -> list[ProviderItem]:
    """
    Drop catalog entries whose identity already appeared.

    The first entry wins, so one sync can never create two provider
    resources with the same carrier identity.
    """
    seen: set[IdentityKey] = set()
    unique: list[ProviderItem] = []
    for item in catalog:
        key = catalog_key(item)
        if key in seen:
            logger.warning("duplicate_catalog_item_skipped", name=item.name, key=list(key))
            continue
        seen.add(key)
        unique.append(item)
    return unique


def sort_resources(resources: list[Resource]) -> list[Resource]:
    """Sort by display name; id breaks ties so the order is total."""
    return sorted(resources, key=lambda r: (r.name.casefold(), r.name, r.id))


def _merge_weight(existing: Optional[WeightLimits], item: ProviderItem) -> Optional[WeightLimits]:
    """Refresh carrier weight limits, keep the user's tare weight."""
    if item.weight is None:
        return existing
    if existing is None:
        return item.weight
    return existing.model_copy(update={
        "max_weight": item.weight.max_weight,
        "unit": item.weight.unit,
    })


def _provider_fields(item: ProviderItem) -> dict:
    """Fields a sync always refreshes on a provider resource."""
    return {
        "name": item.name,
        "description": item.description,
        "carrier": item.carrier,
        "flat_rate": item.flat_rate,
        "flat_rate_price": item.flat_rate_price,
        "available_for": item.available_for,
        "service_type": item.service_type,
        "estimated_days": item.estimated_days,
        "features": item.features,
        "restrictions": item.restrictions,
    }


def merge_matched(existing: Resource, item: ProviderItem) -> Resource:
    """
    Apply a catalog entry to the provider resource it matched.

    Editable entries keep the user's dimensions when all three are set;
    otherwise the carrier's dimensions are adopted. Non-editable entries
    take the carrier's dimensions. User fields are never touched.
    """
    update = _provider_fields(item)
    update["weight"] = _merge_weight(existing.weight, item)

    if item.is_editable:
        keep_user_dimensions = existing.has_complete_dimensions
        dimensions = existing.dimensions if keep_user_dimensions else item.dimensions
        update["dimensions"] = dimensions
        update["is_editable"] = True
        update["needs_completion"] = (
            item.kind == ResourceKind.BOX
            and not (dimensions is not None and dimensions.is_complete)
        )
    else:
        update["dimensions"] = item.dimensions
        update["is_editable"] = False
        update["needs_completion"] = False

    return existing.model_copy(update=update)


def build_from_item(item: ProviderItem, resource_id: str) -> Resource:
    """New provider resource for a catalog entry seen for the first time."""
    needs_completion = (
        item.kind == ResourceKind.BOX
        and item.is_editable
        and not (item.dimensions is not None and item.dimensions.is_complete)
    )
    return Resource(
        id=resource_id,
        kind=item.kind,
        origin=ResourceOrigin.PROVIDER,
        dimensions=item.dimensions,
        weight=item.weight,
        is_editable=item.is_editable,
        needs_completion=needs_completion,
        # Boxes waiting for dimensions start disabled
        is_active=not needs_completion,
        **_provider_fields(item),
    )


# ===================
# MERGE
# ===================

def sync_partition(
    partition_id: str,
    existing: list[Resource],
    catalog: list[ProviderItem],
    synced_carriers: Optional[Iterable[str]] = None,
    id_factory: IdFactory = generate_id,
) -> MergeResult:
    """
    Merge a carrier catalog into one warehouse's resource list.

    Args:
        partition_id: Warehouse being synced
        existing: Current resources of the warehouse (one kind)
        catalog: Catalog entries fetched from the carriers
        synced_carriers: Carriers the catalog covers. Provider resources of
            other carriers are kept as they are. None means every carrier.
        id_factory: Id generator for new resources

    Returns:
        MergeResult with the merged, name-sorted resource list
    """
    carriers = set(synced_carriers) if synced_carriers is not None else None
    result = MergeResult(partition_id=partition_id)

    providers_by_key: dict[IdentityKey, Resource] = {}
    for resource in existing:
        if resource.is_provider:
            providers_by_key.setdefault(key_of(resource), resource)

    matched_ids: set[str] = set()
    merged: list[Resource] = []

    for item in dedupe_catalog(catalog):
        match = providers_by_key.get(catalog_key(item))

        if match is not None and match.id not in matched_ids:
            matched_ids.add(match.id)
            refreshed = merge_matched(match, item)
            merged.append(refreshed)
            if refreshed == match:
                result.unchanged.append(match.id)
            else:
                result.updated.append(match.id)
            continue

        created = build_from_item(item, id_factory(PROVIDER_ID_PREFIX))
        merged.append(created)
        result.added.append(created.id)
        logger.debug(
            "catalog_item_added",
            partition_id=partition_id,
            name=item.name,
            editable=item.is_editable,
        )

    for resource in existing:
        if resource.id in matched_ids:
            continue

        if not resource.is_provider:
            merged.append(resource)
            result.retained.append(resource.id)
        elif resource.is_editable:
            # Carrier stopped listing it, but the user configured it
            merged.append(resource)
            result.retained.append(resource.id)
        elif carriers is not None and carrier_of(resource) not in carriers:
            merged.append(resource)
            result.retained.append(resource.id)
        else:
            result.dropped.append(resource.id)

    result.resources = sort_resources(merged)

    logger.info(
        "partition_catalog_merged",
        partition_id=partition_id,
        catalog_count=len(catalog),
        added=len(result.added),
        updated=len(result.updated),
        retained=len(result.retained),
        dropped=len(result.dropped),
    )

    return result


def sync_partitions(
    snapshot: dict[str, list[Resource]],
    partition_ids: list[str],
    kind: ResourceKind,
    catalog: list[ProviderItem],
    synced_carriers: Optional[Iterable[str]] = None,
    id_factory: IdFactory = generate_id,
) -> tuple[list[MergeResult], list[PartitionWrite]]:
    """
    Merge the same catalog into several warehouses.

    Each warehouse is merged independently. Writes are produced only for
    warehouses whose list actually changed.

    Returns:
        Tuple of (merge results, writes)
    """
    carriers = list(synced_carriers) if synced_carriers is not None else None
    kind_catalog = [item for item in catalog if item.kind == kind]

    results: list[MergeResult] = []
    writes: list[PartitionWrite] = []
    for partition_id in partition_ids:
        existing = snapshot.get(partition_id, [])
        merge = sync_partition(
            partition_id,
            existing,
            kind_catalog,
            synced_carriers=carriers,
            id_factory=id_factory,
        )
        results.append(merge)
        if merge.resources != existing:
            writes.append(PartitionWrite(
                partition_id=partition_id,
                kind=kind,
                resources=merge.resources,
            ))
    return results, writes
