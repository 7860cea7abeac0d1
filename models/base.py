"""
Base schemas and shared helpers for all models.
"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class TimestampMixin(BaseModel):
    """Add creation timestamp to response models."""
    created_at: datetime


def none_if_blank(value: Any) -> Any:
    """
    Collapse empty or whitespace-only strings to None.

    None is the only "absent" marker for optional text fields.
    """
    if isinstance(value, str) and not value.strip():
        return None
    return value


def reject_float(value: Any) -> Any:
    """Money and ids must arrive as ints or integer strings, never floats."""
    if isinstance(value, float):
        raise ValueError("must be an exact integer, not a floating point number")
    return value
