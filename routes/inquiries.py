"""
Inquiry API routes.
"""

from fastapi import APIRouter, Depends, Query

from models.inquiry import InquiryCreate, InquiryListResponse
from services.inquiry_service import get_inquiry_service
from routes.dependencies import handle_error, require_admin

router = APIRouter()


@router.post("", status_code=201)
async def submit_inquiry(data: InquiryCreate):
    """Send a message from the contact form."""
    try:
        inquiry_id = get_inquiry_service().submit(data)
        return {"id": inquiry_id}

    except Exception as e:
        return handle_error(e)


@router.get("", response_model=InquiryListResponse)
async def list_inquiries(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: str = Depends(require_admin)
):
    """Page of inquiries, newest first."""
    try:
        inquiries = get_inquiry_service().get_all(offset=offset, limit=limit)
        return InquiryListResponse(data=inquiries, offset=offset, limit=limit)

    except Exception as e:
        return handle_error(e)
