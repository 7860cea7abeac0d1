"""
Cart API routes.

Every route works on the cart of the session named by X-Session-ID.
"""

from fastapi import APIRouter, Depends
import structlog

from models.cart import CartItemAdd, CartQuantityUpdate, CartResponse
from models.order import CheckoutRequest, OrderPlacedResponse
from services.cart_service import Cart, get_cart_service
from services.checkout_service import get_checkout_service
from utils.currency import format_inr
from routes.dependencies import handle_error, get_session_id

logger = structlog.get_logger(__name__)

router = APIRouter()


def _cart_response(cart: Cart) -> CartResponse:
    total = cart.total
    return CartResponse(
        items=cart.items,
        item_count=cart.item_count,
        total=total,
        total_display=format_inr(total)
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=CartResponse)
async def get_cart(session_id: str = Depends(get_session_id)):
    """Current cart contents and totals."""
    try:
        return _cart_response(get_cart_service().get_cart(session_id))

    except Exception as e:
        return handle_error(e)


@router.post("/items", response_model=CartResponse)
async def add_cart_item(
    data: CartItemAdd,
    session_id: str = Depends(get_session_id)
):
    """
    Add a product to the cart, merging with an existing line.

    Raises:
        404: Product not found
        422: Quantity out of range
    """
    try:
        service = get_cart_service()
        service.add_product(session_id, data.product_id, data.quantity)
        return _cart_response(service.get_cart(session_id))

    except Exception as e:
        return handle_error(e)


@router.patch("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: int,
    data: CartQuantityUpdate,
    session_id: str = Depends(get_session_id)
):
    """Set a line's quantity. Zero or less removes it."""
    try:
        cart = get_cart_service().set_quantity(session_id, product_id, data.quantity)
        return _cart_response(cart)

    except Exception as e:
        return handle_error(e)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: int,
    session_id: str = Depends(get_session_id)
):
    """Remove a line. Unknown ids are ignored."""
    try:
        cart = get_cart_service().get_cart(session_id)
        cart.remove_item(product_id)
        return _cart_response(cart)

    except Exception as e:
        return handle_error(e)


@router.delete("", response_model=CartResponse)
async def clear_cart(session_id: str = Depends(get_session_id)):
    """Empty the cart."""
    try:
        cart = get_cart_service().get_cart(session_id)
        cart.clear_cart()
        return _cart_response(cart)

    except Exception as e:
        return handle_error(e)


@router.post("/checkout", response_model=OrderPlacedResponse, status_code=201)
async def checkout(
    data: CheckoutRequest,
    session_id: str = Depends(get_session_id)
):
    """
    Place an order for the whole cart.

    The cart is emptied only after the order is stored.

    Raises:
        422: Cart is empty or customer details invalid
    """
    try:
        cart = get_cart_service().get_cart(session_id)
        total = cart.total
        order_id = get_checkout_service().checkout(cart, data.customer_details)
        return OrderPlacedResponse(order_id=order_id, total_amount=total)

    except Exception as e:
        return handle_error(e)
