"""
Business logic services.

The reconciliation modules (merge, aggregate, toggle, duplicate, delete,
edit) are pure functions over warehouse snapshots; ShippingResourceService
loads snapshots and applies their writes.
"""

from services import (
    aggregate_view_service,
    catalog_merger,
    deletion_service,
    duplicate_group_service,
    resource_edit_service,
    toggle_service,
)
from services.partition_store import (
    PartitionStore,
    SupabasePartitionStore,
    get_partition_store,
)
from services.shipping_resource_service import (
    ShippingResourceService,
    get_shipping_resource_service,
)

__all__ = [
    "aggregate_view_service",
    "catalog_merger",
    "deletion_service",
    "duplicate_group_service",
    "resource_edit_service",
    "toggle_service",
    "PartitionStore",
    "SupabasePartitionStore",
    "get_partition_store",
    "ShippingResourceService",
    "get_shipping_resource_service",
]
