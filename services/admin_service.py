"""
Admin role checks and the one-time admin bootstrap.

Roles live in the admins table:
    admins(principal text primary key, bootstrap boolean unique, created_at)

The unique bootstrap column makes the initial claim first-caller-wins: only
one row can ever carry bootstrap = true.

Role checks issued from request handlers go through check_caller_admin /
check_any_admin, which run the blocking query in a worker thread and give
up after settings.admin_check_timeout_seconds. A timeout is reported as
AdminCheckTimeoutError, never as "not an admin".
"""

import asyncio
from typing import Callable, Optional, TypeVar
import structlog

from config import get_admin_client, get_supabase_client, settings
from models.admin import AdminStatus
from exceptions import (
    AdminAlreadyClaimedError,
    AdminCheckTimeoutError,
    AdminCheckUnavailableError,
    DatabaseError
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Postgres / PostgREST codes
PERMISSION_DENIED_CODES = ("42501",)
MISSING_RELATION_CODES = ("42P01", "PGRST205", "PGRST202")
UNIQUE_VIOLATION_CODES = ("23505",)


def _error_code(error: Exception) -> Optional[str]:
    code = getattr(error, "code", None)
    return str(code) if code is not None else None


def is_permission_denied(error: Exception) -> bool:
    return (
        _error_code(error) in PERMISSION_DENIED_CODES
        or "permission denied" in str(error).lower()
    )


def is_missing_relation(error: Exception) -> bool:
    text = str(error).lower()
    return (
        _error_code(error) in MISSING_RELATION_CODES
        or "does not exist" in text
        or "could not find the table" in text
    )


def is_unique_violation(error: Exception) -> bool:
    return (
        _error_code(error) in UNIQUE_VIOLATION_CODES
        or "duplicate key" in str(error).lower()
    )


class AdminService:
    """
    Admin role lookups.

    Sync methods talk to the store directly. The async wrappers bound them
    with a timeout for use from request handlers.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.db = get_supabase_client()
        self.table = "admins"
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.admin_check_timeout_seconds
        )

    # ===================
    # SYNC CHECKS
    # ===================

    def is_admin(self, principal: str) -> AdminStatus:
        """
        Definitive role check for one principal.

        A permission-denied response from the store counts as DENIED.

        Raises:
            AdminCheckUnavailableError: Backend has no admin role table
            DatabaseError: Any other store failure
        """
        try:
            result = (
                self.db.table(self.table)
                .select("principal")
                .eq("principal", principal)
                .limit(1)
                .execute()
            )
        except Exception as e:
            if is_permission_denied(e):
                logger.info("admin_check_denied_by_store", principal=principal)
                return AdminStatus.DENIED
            self._raise_store_failure("is_admin", e)

        status = AdminStatus.ADMIN if result.data else AdminStatus.DENIED
        logger.debug("admin_checked", principal=principal, status=status.value)
        return status

    def has_any_admin(self) -> bool:
        """True once the initial admin has been claimed."""
        try:
            result = (
                self.db.table(self.table)
                .select("principal", count="exact")
                .limit(1)
                .execute()
            )
        except Exception as e:
            self._raise_store_failure("has_any_admin", e)

        if result.count is not None:
            return result.count > 0
        return bool(result.data)

    def claim_initial_admin(self, principal: str) -> None:
        """
        Make principal the first admin. Succeeds once, globally.

        Raises:
            AdminAlreadyClaimedError: An admin already exists
            AdminCheckUnavailableError: Backend has no admin role table
        """
        if self.has_any_admin():
            raise AdminAlreadyClaimedError()

        client = get_admin_client() or self.db

        try:
            client.table(self.table).insert({
                "principal": principal,
                "bootstrap": True,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                logger.warning("admin_claim_lost_race", principal=principal)
                raise AdminAlreadyClaimedError()
            self._raise_store_failure("claim_initial_admin", e)

        logger.info("initial_admin_claimed", principal=principal)

    # ===================
    # BOUNDED ASYNC CHECKS
    # ===================

    async def check_caller_admin(self, principal: str) -> AdminStatus:
        """
        is_admin bounded by the configured timeout.

        Raises:
            AdminCheckTimeoutError: No answer within the timeout
        """
        return await self._bounded("is_admin", self.is_admin, principal)

    async def check_any_admin(self) -> bool:
        """has_any_admin bounded by the configured timeout."""
        return await self._bounded("has_any_admin", self.has_any_admin)

    async def _bounded(self, operation: str, func: Callable[..., T], *args) -> T:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "admin_check_timed_out",
                operation=operation,
                timeout_seconds=self.timeout_seconds
            )
            raise AdminCheckTimeoutError(operation, self.timeout_seconds)

    # ===================
    # HELPERS
    # ===================

    def _raise_store_failure(self, operation: str, error: Exception) -> None:
        if is_missing_relation(error):
            logger.error(
                "admin_check_unavailable",
                operation=operation,
                error=str(error)
            )
            raise AdminCheckUnavailableError(operation, str(error))

        logger.error(
            "admin_check_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__
        )
        raise DatabaseError(operation, str(error))


# Singleton instance for convenience
_admin_service: Optional[AdminService] = None

def get_admin_service() -> AdminService:
    """Get or create AdminService instance."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service
