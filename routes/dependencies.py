"""
Shared route helpers: error conversion and request identity.

Caller identity comes from the external identity provider as an opaque
principal string in the X-Caller-Principal header. Carts are keyed by the
X-Session-ID header.
"""

from typing import Optional
from fastapi import Depends, Header
from fastapi.responses import JSONResponse
import structlog

from models.admin import AdminStatus
from services.admin_service import get_admin_service
from exceptions import (
    AppError,
    AccessDeniedError,
    AuthenticationRequiredError,
    ValidationError
)

logger = structlog.get_logger(__name__)


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
    # Unexpected error
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
# DEPENDENCIES
# ===================

async def get_caller_principal(
    x_caller_principal: Optional[str] = Header(None, alias="X-Caller-Principal")
) -> str:
    """Principal of the calling user. Raises 401 when absent."""
    if not x_caller_principal or not x_caller_principal.strip():
        raise AuthenticationRequiredError()
    return x_caller_principal.strip()


async def get_session_id(
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID")
) -> str:
    """Browsing session that owns the cart."""
    if not x_session_id or not x_session_id.strip():
        raise ValidationError(
            code="SESSION_REQUIRED",
            message="X-Session-ID header is required"
        )
    return x_session_id.strip()


async def require_admin(principal: str = Depends(get_caller_principal)) -> str:
    """
    Allow only admins through.

    Raises:
        AccessDeniedError: Definitive non-admin (403)
        AdminCheckTimeoutError: Check did not finish in time (504)
        AdminCheckUnavailableError: Backend has no admin roles (503)
    """
    status = await get_admin_service().check_caller_admin(principal)
    if status != AdminStatus.ADMIN:
        logger.warning("admin_access_denied", principal=principal)
        raise AccessDeniedError(principal)
    return principal
