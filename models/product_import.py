"""
Response schemas for the product import endpoints.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class ImportCandidateResponse(BaseSchema):
    """One parsed row, with the errors that belong to it."""

    row: int
    name: str
    brand: str
    category: str
    price: Optional[int] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class ImportFieldError(BaseSchema):
    row: int
    field: str
    message: str


class ImportPreviewResponse(BaseSchema):
    """Parse result shown before anything is written."""

    file_name: str
    candidates: list[ImportCandidateResponse]
    errors: list[ImportFieldError]
    valid_count: int
    invalid_count: int


class BulkImportFailure(BaseSchema):
    """A valid row the store refused."""

    row: int
    name: str
    error: str


class BulkImportResponse(BaseSchema):
    """
    Outcome of a partial-success import.

    created_ids holds one id per inserted row. Invalid rows are skipped
    and listed in errors; store failures are listed in failed.
    """

    file_name: str
    created_ids: list[int]
    created_count: int
    failed: list[BulkImportFailure]
    skipped_count: int
    errors: list[ImportFieldError]
