"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
    none_if_blank,
    reject_float
)
from models.product import (
    ProductCreate,
    ProductResponse,
    ProductListResponse,
    ProductCreatedResponse
)
from models.product_import import (
    ImportCandidateResponse,
    ImportFieldError,
    ImportPreviewResponse,
    BulkImportFailure,
    BulkImportResponse
)
from models.cart import (
    CartLineItem,
    CartItemAdd,
    CartQuantityUpdate,
    CartResponse
)
from models.order import (
    CustomerDetails,
    OrderLineItem,
    OrderCreate,
    CheckoutRequest,
    OrderResponse,
    OrderListResponse,
    OrderPlacedResponse
)
from models.inquiry import (
    InquiryCreate,
    InquiryResponse,
    InquiryListResponse
)
from models.admin import (
    AdminStatus,
    AdminStatusResponse,
    AdminExistsResponse
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    "none_if_blank",
    "reject_float",

    # Product
    "ProductCreate",
    "ProductResponse",
    "ProductListResponse",
    "ProductCreatedResponse",

    # Product import
    "ImportCandidateResponse",
    "ImportFieldError",
    "ImportPreviewResponse",
    "BulkImportFailure",
    "BulkImportResponse",

    # Cart
    "CartLineItem",
    "CartItemAdd",
    "CartQuantityUpdate",
    "CartResponse",

    # Order
    "CustomerDetails",
    "OrderLineItem",
    "OrderCreate",
    "CheckoutRequest",
    "OrderResponse",
    "OrderListResponse",
    "OrderPlacedResponse",

    # Inquiry
    "InquiryCreate",
    "InquiryResponse",
    "InquiryListResponse",

    # Admin
    "AdminStatus",
    "AdminStatusResponse",
    "AdminExistsResponse",
]
