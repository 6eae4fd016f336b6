"""
Supabase clients for the warehouse resource store.

The anon-key client serves API requests; the service-role client lets the
scheduled sync write every warehouse.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings
from config.shipping import WAREHOUSES_TABLE
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get the cached Supabase client.

    Raises:
        DatabaseError: If the client cannot be created
    """
    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error("supabase_connection_failed", error=str(e), error_type=type(e).__name__)
        raise DatabaseError("connect", str(e)) from e

    logger.info("supabase_connected", url=settings.supabase_url[:30] + "...")
    return client


def get_admin_client() -> Optional[Client]:
    """Service-role client, or None when SUPABASE_SERVICE_KEY is unset or invalid."""
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        logger.error("admin_client_failed", error=str(e))
        return None


def check_connection() -> dict:
    """Startup health check: counts the warehouses the store can see."""
    try:
        response = (
            get_supabase_client()
            .table(WAREHOUSES_TABLE)
            .select("id", count="exact")
            .execute()
        )
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "warehouses_count": response.count}
