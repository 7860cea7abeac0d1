"""
Durable key-value storage used to persist carts.

Values are opaque text; the cart service decides what goes in them.
The memory store keeps data for the life of the process and is meant for
local development and tests.
"""

from datetime import datetime
from typing import Optional
import structlog

from config import get_supabase_client, settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class KeyValueStore:
    """Minimal text key-value interface."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SupabaseKeyValueStore(KeyValueStore):
    """
    Store backed by the kv_store table.

    Table: kv_store(key text primary key, value text, updated_at timestamptz)
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "kv_store"

    def get(self, key: str) -> Optional[str]:
        try:
            result = (
                self.db.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("kv_get_failed", key=key, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return result.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.db.table(self.table).upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.utcnow().isoformat()
                },
                on_conflict="key"
            ).execute()
        except Exception as e:
            logger.error("kv_set_failed", key=key, error=str(e))
            raise DatabaseError("upsert", str(e))


# Singleton instance for convenience
_cart_store: Optional[KeyValueStore] = None

def get_cart_store() -> KeyValueStore:
    """Get or create the configured cart store."""
    global _cart_store
    if _cart_store is None:
        if settings.cart_store_backend == "memory":
            _cart_store = MemoryKeyValueStore()
        else:
            _cart_store = SupabaseKeyValueStore()
        logger.info("cart_store_ready", backend=settings.cart_store_backend)
    return _cart_store
