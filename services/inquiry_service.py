"""
Customer inquiries from the contact form.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.inquiry import InquiryCreate, InquiryResponse
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class InquiryService:

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "inquiries"

    def submit(self, data: InquiryCreate) -> int:
        """Store an inquiry and return its id."""
        logger.info("submitting_inquiry", name=data.name)

        try:
            result = self.db.table(self.table).insert(data.model_dump()).execute()
        except Exception as e:
            logger.error("submit_inquiry_failed", error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned")

        inquiry_id = int(result.data[0]["id"])
        logger.info("inquiry_submitted", inquiry_id=inquiry_id)
        return inquiry_id

    def get_all(self, offset: int = 0, limit: int = 50) -> list[InquiryResponse]:
        """Page of inquiries, newest first."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            logger.error("get_inquiries_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [InquiryResponse(**row) for row in result.data]


# Singleton instance for convenience
_inquiry_service: Optional[InquiryService] = None

def get_inquiry_service() -> InquiryService:
    """Get or create InquiryService instance."""
    global _inquiry_service
    if _inquiry_service is None:
        _inquiry_service = InquiryService()
    return _inquiry_service
