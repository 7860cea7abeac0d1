"""
Checkout: turn a session cart into an order.

The cart is cleared only once the order has been stored. If placing the
order fails the error propagates and the cart keeps its lines.
"""

from typing import Optional
import structlog

from models.order import CustomerDetails
from exceptions import EmptyCartError
from services.cart_service import Cart, cart_items_to_order_items
from services.order_service import OrderService, get_order_service

logger = structlog.get_logger(__name__)


class CheckoutService:
    """Places orders from carts."""

    def __init__(self, order_service: Optional[OrderService] = None):
        self._order_service = order_service

    @property
    def orders(self) -> OrderService:
        if self._order_service is None:
            self._order_service = get_order_service()
        return self._order_service

    def checkout(self, cart: Cart, customer: CustomerDetails) -> int:
        """
        Place an order for everything in the cart.

        Returns:
            New order id

        Raises:
            EmptyCartError: Cart has no lines
            DatabaseError: Order could not be stored (cart untouched)
        """
        if cart.is_empty():
            raise EmptyCartError()

        items = cart_items_to_order_items(cart.items)

        logger.info(
            "checkout_started",
            storage_key=cart.storage_key,
            line_count=len(items),
            total_amount=cart.total
        )

        order_id = self.orders.place_order(customer, items)

        cart.clear_cart()

        logger.info("checkout_complete", order_id=order_id)

        return order_id


# Singleton instance for convenience
_checkout_service: Optional[CheckoutService] = None

def get_checkout_service() -> CheckoutService:
    """Get or create CheckoutService instance."""
    global _checkout_service
    if _checkout_service is None:
        _checkout_service = CheckoutService()
    return _checkout_service
