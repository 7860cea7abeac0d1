"""
Supabase clients for the storefront tables.

The anon client serves products, orders, inquiries and carts. The
service-role client is only used to write the admins table.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings
from exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)

# Tables counted by the health check
HEALTH_TABLES = ("products", "orders")


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached anon-key client. Call get_supabase_client.cache_clear() to reconnect.

    Raises:
        ExternalServiceError: The client could not be created
    """
    logger.info("connecting_to_supabase", url=settings.supabase_url[:30] + "...")

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ExternalServiceError("supabase", f"Failed to connect to Supabase: {e}") from e


def get_admin_client() -> Optional[Client]:
    """Service-role client, or None when SUPABASE_SERVICE_KEY is not set."""
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        logger.error("admin_client_failed", error=str(e))
        return None


def check_connection() -> dict:
    """
    Count rows in HEALTH_TABLES.

    Returns {"status": "healthy", "products": n, "orders": n}, or
    {"status": "unhealthy", "error": message} when any query fails.
    """
    try:
        client = get_supabase_client()
        counts = {
            table: client.table(table).select("id", count="exact").limit(1).execute().count or 0
            for table in HEALTH_TABLES
        }
    except Exception as e:
        logger.warning("database_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", **counts}
