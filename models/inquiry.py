"""
Customer inquiry schemas.
"""

from pydantic import Field

from models.base import BaseSchema, TimestampMixin


class InquiryCreate(BaseSchema):
    """Message sent from the contact form."""

    name: str = Field(..., min_length=1, max_length=200)
    contact: str = Field(..., min_length=1, max_length=320, description="Phone or email")
    message: str = Field(..., min_length=1, max_length=5000)


class InquiryResponse(InquiryCreate, TimestampMixin):
    """Stored inquiry."""

    id: int


class InquiryListResponse(BaseSchema):
    data: list[InquiryResponse]
    offset: int
    limit: int
