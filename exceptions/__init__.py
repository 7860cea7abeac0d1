"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Products
    ProductNotFoundError,

    # Product import
    ImportFileError,

    # Orders
    OrderNotFoundError,
    EmptyCartError,

    # Access
    AuthenticationRequiredError,
    AccessDeniedError,
    AdminCheckTimeoutError,
    AdminCheckUnavailableError,
    AdminAlreadyClaimedError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Products
    "ProductNotFoundError",

    # Product import
    "ImportFileError",

    # Orders
    "OrderNotFoundError",
    "EmptyCartError",

    # Access
    "AuthenticationRequiredError",
    "AccessDeniedError",
    "AdminCheckTimeoutError",
    "AdminCheckUnavailableError",
    "AdminAlreadyClaimedError",
]
