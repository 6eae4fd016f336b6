"""
Scheduled job routes.

Called by the scheduler with "Authorization: Bearer <CRON_SECRET>". Syncs
the enabled carriers into every warehouse using the server-side carrier
credentials.
"""

from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse
import structlog

from config import settings, get_admin_client
from models.resource_event import SyncResponse
from models.shipping_resource import CarrierCredentials, ResourceKind
from routes.shipping_resources import handle_error
from services.partition_store import SupabasePartitionStore
from services.shipping_resource_service import (
    ShippingResourceService,
    get_shipping_resource_service,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cron", tags=["Cron"])


def _authorized(authorization: Optional[str]) -> bool:
    if not settings.cron_secret:
        return False
    return authorization == f"Bearer {settings.cron_secret}"


def _cron_credentials() -> dict[str, CarrierCredentials]:
    environment = "production" if settings.is_production else "sandbox"
    return {
        carrier: CarrierCredentials(**values, environment=environment)
        for carrier, values in settings.cron_credentials.items()
    }


def _cron_service() -> ShippingResourceService:
    """Service writing with the admin client when one is configured."""
    client = get_admin_client()
    if client is None:
        return get_shipping_resource_service()
    return ShippingResourceService(store=SupabasePartitionStore(client))


@router.get("/sync/{kind}", response_model=SyncResponse)
async def cron_sync(
    kind: ResourceKind,
    authorization: Optional[str] = Header(None),
):
    """
    Sync one resource kind for all warehouses.

    Returns 401 unless the bearer token matches CRON_SECRET.
    """
    if not _authorized(authorization):
        logger.warning("cron_unauthorized", kind=kind.value)
        return JSONResponse(
            status_code=401,
            content={
                "error": {
                    "code": "UNAUTHORIZED",
                    "message": "Invalid cron secret"
                }
            }
        )

    try:
        service = _cron_service()
        result = service.sync(
            kind,
            settings.enabled_carriers,
            _cron_credentials(),
        )

        logger.info(
            "cron_sync_complete",
            kind=kind.value,
            synced=result.synced_carriers,
            failed=sorted(result.failed_carriers),
        )
        return result

    except Exception as e:
        return handle_error(e)
