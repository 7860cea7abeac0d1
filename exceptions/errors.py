"""
Custom exception classes for the application.

Every error the API can return is an AppError subclass with a stable code.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: int):
        super().__init__(
            resource="Product",
            identifier=str(product_id),
            code="PRODUCT_NOT_FOUND"
        )


# ===================
# PRODUCT IMPORT ERRORS
# ===================

class ImportFileError(ValidationError):
    """
    The uploaded import file cannot be processed at all.

    Raised for unsupported formats, empty files and missing required
    columns. Problems with individual rows are returned as data instead.
    """

    field = "file"

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMPORT_FILE_ERROR",
            message=message,
            details={"field": self.field, **(details or {})}
        )


# ===================
# ORDER ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int):
        super().__init__(
            resource="Order",
            identifier=str(order_id),
            code="ORDER_NOT_FOUND"
        )


class EmptyCartError(ValidationError):
    """Checkout attempted with nothing in the cart."""

    def __init__(self):
        super().__init__(
            code="CART_EMPTY",
            message="Cannot place an order with an empty cart"
        )


# ===================
# ACCESS ERRORS
# ===================

class AuthenticationRequiredError(AppError):
    """No caller identity was supplied (401)."""

    def __init__(self):
        super().__init__(
            code="AUTHENTICATION_REQUIRED",
            message="Please log in to continue",
            status_code=401
        )


class AccessDeniedError(AppError):
    """Caller is authenticated but not an admin (403)."""

    def __init__(self, principal: str):
        super().__init__(
            code="ACCESS_DENIED",
            message="Admin access is required",
            status_code=403,
            details={"principal": principal}
        )


class AdminCheckTimeoutError(AppError):
    """
    An admin role check did not finish in time (504).

    Distinct from AccessDeniedError: the caller was never checked.
    """

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            code="ADMIN_CHECK_TIMEOUT",
            message=f"Admin check {operation} timed out after {timeout_seconds:g} seconds",
            status_code=504,
            details={"operation": operation, "timeout_seconds": timeout_seconds}
        )


class AdminCheckUnavailableError(ExternalServiceError):
    """The backing store does not provide the admin role capability."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            service="admin_roles",
            code="ADMIN_CHECK_UNAVAILABLE",
            message="The backend does not provide the admin role checks",
            details={"operation": operation, "reason": reason}
        )


class AdminAlreadyClaimedError(ConflictError):
    """Initial admin bootstrap was already used."""

    def __init__(self):
        super().__init__(
            code="ADMIN_ALREADY_CLAIMED",
            message="An admin already exists; the initial admin role can only be claimed once"
        )
