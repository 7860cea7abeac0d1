"""
Admin role API routes.

/status answers with ADMIN or DENIED. A check that takes too long answers
504 ADMIN_CHECK_TIMEOUT so the client can offer a retry instead of
showing "access denied".
"""

from fastapi import APIRouter, Depends
import structlog

from models.admin import AdminExistsResponse, AdminStatus, AdminStatusResponse
from services.admin_service import get_admin_service
from routes.dependencies import handle_error, get_caller_principal

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/status", response_model=AdminStatusResponse)
async def admin_status(principal: str = Depends(get_caller_principal)):
    """Whether the caller is an admin."""
    try:
        status = await get_admin_service().check_caller_admin(principal)
        return AdminStatusResponse(principal=principal, status=status)

    except Exception as e:
        return handle_error(e)


@router.get("/exists", response_model=AdminExistsResponse)
async def admin_exists():
    """Whether the initial admin has been claimed."""
    try:
        has_any = await get_admin_service().check_any_admin()
        return AdminExistsResponse(has_any_admin=has_any)

    except Exception as e:
        return handle_error(e)


@router.post("/claim", response_model=AdminStatusResponse, status_code=201)
async def claim_admin(principal: str = Depends(get_caller_principal)):
    """
    Become the first admin.

    Raises:
        409: An admin already exists
    """
    try:
        get_admin_service().claim_initial_admin(principal)
        return AdminStatusResponse(principal=principal, status=AdminStatus.ADMIN)

    except Exception as e:
        return handle_error(e)
