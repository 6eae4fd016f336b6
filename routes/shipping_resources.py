"""
Shipping resources API routes.

Boxes and carrier services, per warehouse or across all warehouses.
Write endpoints act on the all-warehouses view unless a warehouse_id is
given.
"""

from typing import Optional

from fastapi import APIRouter, Body, Query, status
from fastapi.responses import JSONResponse
import structlog

from models.resource_event import OperationResponse, SyncResponse
from models.shipping_resource import (
    AggregateResponse,
    ResourceCreate,
    ResourceKind,
    ResourceListResponse,
    ResourceUpdate,
    SyncRequest,
    WarehouseActionRequest,
)
from services.shipping_resource_service import get_shipping_resource_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/shipping", tags=["Shipping Resources"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# READ ROUTES
# ===================

@router.get("/{kind}", response_model=AggregateResponse)
async def get_aggregate(
    kind: ResourceKind,
    all_carriers: bool = Query(False, description="Include carriers that are not enabled"),
):
    """
    Get the all-warehouses view.

    Each entry carries its per-warehouse states and an
    all_enabled / all_disabled / partial summary.
    """
    try:
        service = get_shipping_resource_service()
        return service.get_aggregate(kind, all_carriers=all_carriers)

    except Exception as e:
        return handle_error(e)


@router.get("/{kind}/warehouses/{warehouse_id}", response_model=ResourceListResponse)
async def list_warehouse_resources(
    kind: ResourceKind,
    warehouse_id: str,
    all_carriers: bool = Query(False, description="Include carriers that are not enabled"),
):
    """
    List the boxes or services of one warehouse.

    Args:
        kind: box or service
        warehouse_id: Warehouse UUID
    """
    try:
        service = get_shipping_resource_service()
        return service.list_partition(kind, warehouse_id, all_carriers=all_carriers)

    except Exception as e:
        return handle_error(e)


# ===================
# SYNC ROUTES
# ===================

@router.post("/{kind}/sync", response_model=SyncResponse)
async def sync_resources(kind: ResourceKind, request: SyncRequest):
    """
    Sync carrier catalogs into one or all warehouses.

    Carriers that fail are skipped and listed in failed_carriers; the
    request only fails when every carrier failed.
    """
    try:
        service = get_shipping_resource_service()
        result = service.sync(
            kind,
            request.carriers,
            request.credentials,
            warehouse_id=request.warehouse_id,
        )

        logger.info(
            "resources_synced_via_api",
            kind=kind.value,
            added=result.added,
            updated=result.updated,
            dropped=result.dropped,
        )
        return result

    except Exception as e:
        return handle_error(e)


# ===================
# RESOURCE ROUTES
# ===================

@router.post("/{kind}", response_model=OperationResponse, status_code=status.HTTP_201_CREATED)
async def create_resource(kind: ResourceKind, data: ResourceCreate):
    """
    Create a custom box or service.

    Without warehouse_id it is added to every warehouse.
    """
    try:
        service = get_shipping_resource_service()
        return service.create(kind, data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{kind}/{resource_id}", response_model=OperationResponse)
async def update_resource(kind: ResourceKind, resource_id: str, data: ResourceUpdate):
    """
    Edit a resource.

    Carrier resources only accept cost, tare weight, activation and (when
    editable) dimensions.
    """
    try:
        service = get_shipping_resource_service()
        return service.update(kind, resource_id, data)

    except Exception as e:
        return handle_error(e)


@router.post("/{kind}/{resource_id}/toggle", response_model=OperationResponse)
async def toggle_resource(
    kind: ResourceKind,
    resource_id: str,
    request: Optional[WarehouseActionRequest] = Body(None),
):
    """
    Enable or disable a resource.

    From the all-warehouses view: if any warehouse has it enabled, it is
    disabled everywhere; otherwise it is enabled everywhere.
    """
    try:
        service = get_shipping_resource_service()
        warehouse_id = request.warehouse_id if request else None
        return service.toggle(kind, resource_id, warehouse_id=warehouse_id)

    except Exception as e:
        return handle_error(e)


@router.post(
    "/{kind}/{resource_id}/duplicate",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_resource(
    kind: ResourceKind,
    resource_id: str,
    request: Optional[WarehouseActionRequest] = Body(None),
):
    """
    Duplicate a resource.

    The copy starts disabled and is named "Copy of <name>".
    """
    try:
        service = get_shipping_resource_service()
        warehouse_id = request.warehouse_id if request else None
        return service.duplicate(kind, resource_id, warehouse_id=warehouse_id)

    except Exception as e:
        return handle_error(e)


@router.delete("/{kind}/{resource_id}", response_model=OperationResponse)
async def delete_resource(
    kind: ResourceKind,
    resource_id: str,
    warehouse_id: Optional[str] = Query(None, description="Delete in this warehouse only"),
):
    """
    Delete a custom resource.

    Carrier resources return 409; disable them instead.
    """
    try:
        service = get_shipping_resource_service()
        return service.delete(kind, resource_id, warehouse_id=warehouse_id)

    except Exception as e:
        return handle_error(e)
