"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.inquiries import router as inquiries_router
from routes.admin import router as admin_router

__all__ = [
    "products_router",
    "cart_router",
    "orders_router",
    "inquiries_router",
    "admin_router",
]
