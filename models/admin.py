"""
Admin role schemas.
"""

from enum import Enum

from models.base import BaseSchema


class AdminStatus(str, Enum):
    """Definitive outcome of an admin role check."""
    ADMIN = "ADMIN"
    DENIED = "DENIED"


class AdminStatusResponse(BaseSchema):
    principal: str
    status: AdminStatus

    @property
    def is_admin(self) -> bool:
        return self.status == AdminStatus.ADMIN


class AdminExistsResponse(BaseSchema):
    has_any_admin: bool
