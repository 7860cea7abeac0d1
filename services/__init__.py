"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, BulkCreateResult, get_product_service
from services.cart_store import (
    KeyValueStore,
    MemoryKeyValueStore,
    SupabaseKeyValueStore,
    get_cart_store,
)
from services.cart_service import (
    Cart,
    CartService,
    get_cart_service,
    calculate_cart_total,
    calculate_cart_count,
    cart_items_to_order_items,
)
from services.order_service import OrderService, get_order_service, calculate_order_total
from services.checkout_service import CheckoutService, get_checkout_service
from services.inquiry_service import InquiryService, get_inquiry_service
from services.admin_service import AdminService, get_admin_service

__all__ = [
    "ProductService",
    "BulkCreateResult",
    "get_product_service",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SupabaseKeyValueStore",
    "get_cart_store",
    "Cart",
    "CartService",
    "get_cart_service",
    "calculate_cart_total",
    "calculate_cart_count",
    "cart_items_to_order_items",
    "OrderService",
    "get_order_service",
    "calculate_order_total",
    "CheckoutService",
    "get_checkout_service",
    "InquiryService",
    "get_inquiry_service",
    "AdminService",
    "get_admin_service",
]
