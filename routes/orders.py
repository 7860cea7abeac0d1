"""
Order API routes.

Placing an order is public; reading orders needs an admin caller.
"""

from fastapi import APIRouter, Depends
import structlog

from models.order import (
    OrderCreate,
    OrderResponse,
    OrderListResponse,
    OrderPlacedResponse
)
from services.order_service import calculate_order_total, get_order_service
from routes.dependencies import handle_error, require_admin

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("", response_model=OrderPlacedResponse, status_code=201)
async def place_order(data: OrderCreate):
    """Place an order with explicit line items."""
    try:
        order_id = get_order_service().place_order(data.customer_details, data.items)
        return OrderPlacedResponse(
            order_id=order_id,
            total_amount=calculate_order_total(data.items)
        )

    except Exception as e:
        return handle_error(e)


@router.get("", response_model=OrderListResponse)
async def list_orders(admin: str = Depends(require_admin)):
    """All orders, newest first."""
    try:
        orders = get_order_service().get_all()
        return OrderListResponse(data=orders, total=len(orders))

    except Exception as e:
        return handle_error(e)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, admin: str = Depends(require_admin)):
    """
    Get a single order.

    Raises:
        404: Order not found
    """
    try:
        return get_order_service().get_by_id(order_id)

    except Exception as e:
        return handle_error(e)
