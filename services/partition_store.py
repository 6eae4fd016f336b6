"""
Per-warehouse persistence of shipping resources.

Each warehouse keeps one row per resource kind holding its full resource
list. The reconciliation services only see the PartitionStore protocol;
SupabasePartitionStore is the production implementation.
"""

from datetime import datetime
from typing import Optional, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import get_supabase_client
from config.shipping import RESOURCES_CONFLICT_COLUMNS, RESOURCES_TABLE, WAREHOUSES_TABLE
from exceptions import DatabaseError
from models.shipping_resource import Resource, ResourceKind

logger = structlog.get_logger(__name__)


class PartitionStore(Protocol):
    """Storage the shipping resource service reads and writes through."""

    def list_partitions(self) -> list[str]:
        """Warehouse ids in a stable display order."""
        ...

    def list_resources(self, partition_id: str, kind: ResourceKind) -> list[Resource]:
        ...

    def save_resources(self, partition_id: str, kind: ResourceKind, resources: list[Resource]) -> None:
        ...


class SupabasePartitionStore:
    """
    Partition store backed by Supabase.

    Tables:
        warehouses: id, name, created_at
        warehouse_shipping_resources: warehouse_id, kind, resources (jsonb), updated_at
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.table = RESOURCES_TABLE
        self.warehouses_table = WAREHOUSES_TABLE

    # ===================
    # READ OPERATIONS
    # ===================

    def list_partitions(self) -> list[str]:
        """
        Get all warehouse ids.

        Ordered by creation time, then id, so every view walks warehouses
        in the same order.

        Returns:
            List of warehouse ids
        """
        try:
            result = (
                self.db.table(self.warehouses_table)
                .select("id, created_at")
                .order("created_at")
                .order("id")
                .execute()
            )
            partition_ids = [row["id"] for row in result.data]
            logger.debug("warehouses_listed", count=len(partition_ids))
            return partition_ids

        except Exception as e:
            logger.error("list_warehouses_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def list_resources(self, partition_id: str, kind: ResourceKind) -> list[Resource]:
        """
        Get the resource list of one warehouse.

        Args:
            partition_id: Warehouse UUID
            kind: box or service

        Returns:
            Resources, empty if the warehouse was never synced
        """
        try:
            result = (
                self.db.table(self.table)
                .select("resources")
                .eq("warehouse_id", partition_id)
                .eq("kind", kind.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "list_resources_failed",
                partition_id=partition_id,
                kind=kind.value,
                error=str(e),
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            return []

        rows = result.data[0].get("resources") or []
        try:
            return [Resource.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            logger.error(
                "stored_resources_invalid",
                partition_id=partition_id,
                kind=kind.value,
                error=str(e),
            )
            raise DatabaseError("decode", str(e), details={"partition_id": partition_id})

    # ===================
    # WRITE OPERATIONS
    # ===================

    def save_resources(self, partition_id: str, kind: ResourceKind, resources: list[Resource]) -> None:
        """
        Replace the resource list of one warehouse.

        Raises:
            DatabaseError: If the upsert fails
        """
        row = {
            "warehouse_id": partition_id,
            "kind": kind.value,
            "resources": [r.model_dump(mode="json") for r in resources],
            "updated_at": datetime.utcnow().isoformat(),
        }
        try:
            (
                self.db.table(self.table)
                .upsert(row, on_conflict=RESOURCES_CONFLICT_COLUMNS)
                .execute()
            )
        except Exception as e:
            logger.error(
                "save_resources_failed",
                partition_id=partition_id,
                kind=kind.value,
                error=str(e),
            )
            raise DatabaseError("upsert", str(e), details={"partition_id": partition_id})

        logger.info(
            "resources_saved",
            partition_id=partition_id,
            kind=kind.value,
            count=len(resources),
        )


# ===================
# SINGLETON
# ===================

_partition_store: Optional[SupabasePartitionStore] = None


def get_partition_store() -> SupabasePartitionStore:
    """Get or create PartitionStore instance."""
    global _partition_store
    if _partition_store is None:
        _partition_store = SupabasePartitionStore()
    return _partition_store
