"""
Shipping Resource Service — boxes and services across warehouses.

Reads warehouse snapshots through the partition store, runs the pure
reconciliation functions, applies the resulting writes and reports what
changed as ResourceEvents.

Every operation runs in one of two modes:
    warehouse_id given    the single-warehouse view, only that warehouse changes
    warehouse_id None     the all-warehouses view
"""

from typing import Optional

import structlog

from config import settings
from exceptions import (
    AppError,
    PartitionWriteFailedError,
    ResourceNotFoundError,
    WarehouseNotFoundError,
)
from integrations.carrier_catalog import CarrierCatalogClient, get_carrier_catalog_client
from models.resource_event import (
    OperationResponse,
    ResourceEvent,
    ResourceEventType,
    SyncResponse,
)
from models.shipping_resource import (
    AggregateEntry,
    AggregateResponse,
    CarrierCredentials,
    PartitionWrite,
    Resource,
    ResourceCreate,
    ResourceKind,
    ResourceListResponse,
    ResourceUpdate,
)
from services import (
    aggregate_view_service,
    catalog_merger,
    deletion_service,
    duplicate_group_service,
    resource_edit_service,
    toggle_service,
)
from services.partition_store import PartitionStore, get_partition_store
from services.resource_identity import identity_label, key_of

logger = structlog.get_logger(__name__)

Snapshot = dict[str, list[Resource]]


class ShippingResourceService:
    """
    Shipping resource business logic.

    Handles listing, carrier sync, toggling, duplication, deletion and
    edits of boxes and services for every warehouse.
    """

    def __init__(
        self,
        store: Optional[PartitionStore] = None,
        catalog_client: Optional[CarrierCatalogClient] = None,
    ):
        self.store = store or get_partition_store()
        self.catalog_client = catalog_client or get_carrier_catalog_client()

    # ===================
    # SNAPSHOTS
    # ===================

    def _partition_ids(self, warehouse_id: Optional[str] = None) -> list[str]:
        partition_ids = self.store.list_partitions()
        if warehouse_id is not None and warehouse_id not in partition_ids:
            raise WarehouseNotFoundError(warehouse_id)
        return partition_ids

    def _snapshot(self, kind: ResourceKind, partition_ids: list[str]) -> Snapshot:
        return {pid: self.store.list_resources(pid, kind) for pid in partition_ids}

    def _find(
        self,
        resource_id: str,
        snapshot: Snapshot,
        partition_ids: list[str],
        warehouse_id: Optional[str],
    ) -> Resource:
        """Resource as shown in the current view."""
        if warehouse_id is not None:
            for resource in snapshot.get(warehouse_id, []):
                if resource.id == resource_id:
                    return resource
            raise ResourceNotFoundError(resource_id)

        aggregate = aggregate_view_service.build_aggregate(snapshot, partition_ids)
        resource = aggregate.get(resource_id)
        if resource is None:
            raise ResourceNotFoundError(resource_id)
        return resource

    # ===================
    # READ OPERATIONS
    # ===================

    def list_partition(
        self,
        kind: ResourceKind,
        warehouse_id: str,
        all_carriers: bool = False,
    ) -> ResourceListResponse:
        """
        Get the resources of one warehouse.

        Args:
            kind: box or service
            warehouse_id: Warehouse UUID
            all_carriers: Also show carriers that are not enabled

        Returns:
            ResourceListResponse
        """
        logger.info("getting_partition_resources", kind=kind.value, warehouse_id=warehouse_id)

        self._partition_ids(warehouse_id)
        carriers = None if all_carriers else settings.enabled_carriers
        resources = aggregate_view_service.filter_by_carriers(
            self.store.list_resources(warehouse_id, kind),
            carriers,
        )

        if not resources:
            logger.info("partition_has_no_resources", kind=kind.value, warehouse_id=warehouse_id)

        return ResourceListResponse(
            warehouse_id=warehouse_id,
            kind=kind,
            data=resources,
            total=len(resources),
        )

    def get_aggregate(
        self,
        kind: ResourceKind,
        all_carriers: bool = False,
    ) -> AggregateResponse:
        """
        Get the all-warehouses view of one kind.

        Returns:
            AggregateResponse with one entry per distinct resource
        """
        logger.info("getting_aggregate_resources", kind=kind.value)

        partition_ids = self._partition_ids()
        snapshot = self._snapshot(kind, partition_ids)
        aggregate = aggregate_view_service.build_aggregate(snapshot, partition_ids)

        carriers = None if all_carriers else settings.enabled_carriers
        visible = aggregate_view_service.filter_by_carriers(aggregate.resources, carriers)

        entries = [
            AggregateEntry(
                resource=resource,
                summary=aggregate.summaries[resource.id],
                states=aggregate.states_by_resource_id[resource.id],
            )
            for resource in visible
        ]

        logger.info("aggregate_resources_retrieved", kind=kind.value, count=len(entries))
        return AggregateResponse(
            kind=kind,
            warehouse_ids=partition_ids,
            data=entries,
            total=len(entries),
        )

    # ===================
    # WRITE APPLICATION
    # ===================

    def apply_writes(self, writes: list[PartitionWrite]) -> list[str]:
        """
        Persist a batch of warehouse writes.

        Writes are applied one by one; a failure does not stop the rest of
        the batch and nothing already saved is rolled back.

        Returns:
            Warehouse ids written

        Raises:
            PartitionWriteFailedError: If any write failed, listing the
                warehouses that were saved and the ones that were not
        """
        succeeded: list[str] = []
        failed: dict[str, str] = {}

        for write in writes:
            try:
                self.store.save_resources(write.partition_id, write.kind, write.resources)
                succeeded.append(write.partition_id)
            except AppError as e:
                failed[write.partition_id] = e.message
            except Exception as e:
                logger.error(
                    "partition_write_error",
                    partition_id=write.partition_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                failed[write.partition_id] = str(e)

        if failed:
            last_failed = list(failed)[-1]
            logger.error(
                "partition_writes_failed",
                partition_id=last_failed,
                succeeded=succeeded,
                failed=sorted(failed),
            )
            raise PartitionWriteFailedError(last_failed, succeeded, failed)

        return succeeded

    def _emit(
        self,
        event_type: ResourceEventType,
        resource: Resource,
        partition_ids: list[str],
        **details,
    ) -> ResourceEvent:
        event = ResourceEvent(
            event_type=event_type,
            kind=resource.kind,
            partition_ids=partition_ids,
            identity=identity_label(key_of(resource)),
            resource_id=resource.id,
            details=details,
        )
        logger.info(
            event_type.value,
            kind=resource.kind.value,
            identity=event.identity,
            resource_id=resource.id,
            partition_ids=partition_ids,
            **details,
        )
        return event

    # ===================
    # SYNC
    # ===================

    def sync(
        self,
        kind: ResourceKind,
        carriers: list[str],
        credentials: dict[str, CarrierCredentials],
        warehouse_id: Optional[str] = None,
    ) -> SyncResponse:
        """
        Sync one kind from carrier catalogs into one or all warehouses.

        Carriers that fail are skipped and reported; their existing
        resources stay as they are.

        Raises:
            CredentialsMissingError, CarrierSyncError: If every carrier failed
            PartitionWriteFailedError: If a warehouse could not be saved
        """
        logger.info("syncing_carrier_catalog", kind=kind.value, carriers=carriers, warehouse_id=warehouse_id)

        partition_ids = self._partition_ids(warehouse_id)
        targets = [warehouse_id] if warehouse_id is not None else partition_ids

        fetched = self.catalog_client.fetch_catalog(kind, carriers, credentials)
        if fetched.all_failed:
            raise next(iter(fetched.errors.values()))

        snapshot = self._snapshot(kind, targets)
        merges, writes = catalog_merger.sync_partitions(
            snapshot,
            targets,
            kind,
            fetched.items,
            synced_carriers=fetched.synced_carriers,
        )
        written = self.apply_writes(writes)

        events: list[ResourceEvent] = []
        merged_by_id: dict[str, Resource] = {
            r.id: r for merge in merges for r in merge.resources
        }
        for merge in merges:
            for resource_id in merge.added + merge.updated:
                resource = merged_by_id[resource_id]
                events.append(self._emit(
                    ResourceEventType.RESOURCE_MERGED,
                    resource,
                    [merge.partition_id],
                    added=resource_id in merge.added,
                ))

        return SyncResponse(
            kind=kind,
            partition_ids=written,
            synced_carriers=fetched.synced_carriers,
            failed_carriers={c: e.message for c, e in fetched.errors.items()},
            catalog_count=len(fetched.items),
            added=sum(len(m.added) for m in merges),
            updated=sum(len(m.updated) for m in merges),
            dropped=sum(len(m.dropped) for m in merges),
            events=events,
        )

    # ===================
    # USER ACTIONS
    # ===================

    def toggle(
        self,
        kind: ResourceKind,
        resource_id: str,
        warehouse_id: Optional[str] = None,
    ) -> OperationResponse:
        """
        Enable or disable a resource.

        Raises:
            ResourceNotFoundError: If the resource is not in the view
            IncompleteResourceError: If enabling a box without dimensions
        """
        partition_ids = self._partition_ids(warehouse_id)
        snapshot = self._snapshot(kind, partition_ids)
        resource = self._find(resource_id, snapshot, partition_ids, warehouse_id)

        if warehouse_id is not None:
            result = toggle_service.toggle_in_partition(resource, snapshot, warehouse_id)
        else:
            result = toggle_service.toggle(resource, snapshot, partition_ids)

        written = self.apply_writes(result.writes)
        event = self._emit(
            ResourceEventType.RESOURCE_TOGGLED, resource, written, is_active=result.target_state
        )
        return OperationResponse(
            kind=kind,
            partition_ids=written,
            events=[event],
            resource_id=resource.id,
            is_active=result.target_state,
        )

    def duplicate(
        self,
        kind: ResourceKind,
        resource_id: str,
        warehouse_id: Optional[str] = None,
    ) -> OperationResponse:
        """
        Duplicate a resource.

        From the all-warehouses view the copies form a duplicate group;
        inside a warehouse the copy is independent.
        """
        partition_ids = self._partition_ids(warehouse_id)
        snapshot = self._snapshot(kind, partition_ids)
        source = self._find(resource_id, snapshot, partition_ids, warehouse_id)

        if warehouse_id is not None:
            copy = duplicate_group_service.duplicate_within_partition(source, warehouse_id)
            additions = {warehouse_id: copy}
            group_id = None
        else:
            group = duplicate_group_service.duplicate_across_partitions(source, partition_ids)
            additions = group.members
            group_id = group.group_id
            copy = next(iter(group.members.values()), None)
            if copy is None:
                raise WarehouseNotFoundError("all")

        writes = duplicate_group_service.plan_additions(snapshot, additions, kind)
        written = self.apply_writes(writes)
        event = self._emit(
            ResourceEventType.RESOURCE_DUPLICATED,
            copy,
            written,
            source_id=source.id,
            duplicate_group_id=group_id,
        )
        return OperationResponse(
            kind=kind,
            partition_ids=written,
            events=[event],
            resource_id=copy.id,
            is_active=copy.is_active,
        )

    def delete(
        self,
        kind: ResourceKind,
        resource_id: str,
        warehouse_id: Optional[str] = None,
    ) -> OperationResponse:
        """
        Delete a custom resource.

        Raises:
            NotDeletableError: If the resource is carrier-provided
        """
        partition_ids = self._partition_ids(warehouse_id)
        snapshot = self._snapshot(kind, partition_ids)
        resource = self._find(resource_id, snapshot, partition_ids, warehouse_id)

        if warehouse_id is not None:
            result = deletion_service.delete_in_partition(
                resource, snapshot, warehouse_id, partition_ids
            )
        else:
            result = deletion_service.delete(resource, snapshot, partition_ids)

        written = self.apply_writes(result.writes)
        event = self._emit(ResourceEventType.RESOURCE_DELETED, resource, written)
        return OperationResponse(
            kind=kind,
            partition_ids=written,
            events=[event],
            resource_id=resource.id,
        )

    def create(self, kind: ResourceKind, payload: ResourceCreate) -> OperationResponse:
        """Create a custom resource in one warehouse or in all."""
        partition_ids = self._partition_ids(payload.warehouse_id)
        snapshot = self._snapshot(kind, partition_ids)

        result = resource_edit_service.create_custom(payload, kind, snapshot, partition_ids)
        written = self.apply_writes(result.writes)
        event = self._emit(ResourceEventType.RESOURCE_CREATED, result.resource, written)
        return OperationResponse(
            kind=kind,
            partition_ids=written,
            events=[event],
            resource_id=result.resource.id,
            is_active=result.resource.is_active,
        )

    def update(
        self,
        kind: ResourceKind,
        resource_id: str,
        payload: ResourceUpdate,
    ) -> OperationResponse:
        """Edit a resource in one warehouse or in every warehouse holding it."""
        partition_ids = self._partition_ids(payload.warehouse_id)
        snapshot = self._snapshot(kind, partition_ids)
        resource = self._find(resource_id, snapshot, partition_ids, payload.warehouse_id)

        result = resource_edit_service.apply_edit(resource, payload, snapshot, partition_ids)
        written = self.apply_writes(result.writes)
        event = self._emit(
            ResourceEventType.RESOURCE_UPDATED,
            result.resource,
            written,
            fields=sorted(payload.model_dump(exclude_none=True, exclude={"warehouse_id"})),
        )
        return OperationResponse(
            kind=kind,
            partition_ids=written,
            events=[event],
            resource_id=result.resource.id,
            is_active=result.resource.is_active,
        )


# ===================
# SINGLETON
# ===================

_shipping_resource_service: Optional[ShippingResourceService] = None


def get_shipping_resource_service() -> ShippingResourceService:
    """Get or create ShippingResourceService instance."""
    global _shipping_resource_service
    if _shipping_resource_service is None:
        _shipping_resource_service = ShippingResourceService()
    return _shipping_resource_service
