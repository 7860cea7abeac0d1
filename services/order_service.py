"""
Order service.

Orders are written once and never changed:
    orders(id bigint, customer_details jsonb, items jsonb,
           total_amount bigint, created_at)
"""

from typing import Iterable, Optional
import structlog

from config import get_supabase_client
from models.order import CustomerDetails, OrderLineItem, OrderResponse
from exceptions import (
    OrderNotFoundError,
    ValidationError,
    DatabaseError
)
from utils.currency import format_inr

logger = structlog.get_logger(__name__)


def calculate_order_total(items: Iterable[OrderLineItem]) -> int:
    """Sum of price * quantity over order lines."""
    return sum((item.price * item.quantity for item in items), 0)


class OrderService:
    """Order placement and lookup."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "orders"

    # ===================
    # WRITE OPERATIONS
    # ===================

    def place_order(
        self,
        customer: CustomerDetails,
        items: list[OrderLineItem]
    ) -> int:
        """
        Store a new order.

        Args:
            customer: Validated contact and delivery details
            items: Order lines, at least one

        Returns:
            Order id assigned by the store

        Raises:
            ValidationError: No items
            DatabaseError: Store refused the insert
        """
        if not items:
            raise ValidationError(
                code="ORDER_EMPTY",
                message="An order needs at least one item"
            )

        total = calculate_order_total(items)

        logger.info(
            "placing_order",
            item_count=len(items),
            total_amount=total,
            total_display=format_inr(total)
        )

        insert_data = {
            "customer_details": customer.model_dump(),
            "items": [item.model_dump() for item in items],
            "total_amount": total,
        }

        try:
            result = self.db.table(self.table).insert(insert_data).execute()
        except Exception as e:
            logger.error("place_order_failed", error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned")

        order_id = int(result.data[0]["id"])

        logger.info(
            "order_placed",
            order_id=order_id,
            total_display=format_inr(total)
        )

        return order_id

    # ===================
    # READ OPERATIONS
    # ===================

    def get_by_id(self, order_id: int) -> OrderResponse:
        """
        Get a single order.

        Raises:
            OrderNotFoundError: If order doesn't exist
        """
        logger.debug("getting_order", order_id=order_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise OrderNotFoundError(order_id)

        return OrderResponse(**result.data[0])

    def get_all(self) -> list[OrderResponse]:
        """All orders, newest first."""
        logger.info("getting_orders")

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_orders_failed", error=str(e))
            raise DatabaseError("select", str(e))

        orders = [OrderResponse(**row) for row in result.data]
        orders.sort(key=lambda o: o.created_at, reverse=True)

        logger.info("orders_retrieved", count=len(orders))

        return orders


# Singleton instance for convenience
_order_service: Optional[OrderService] = None

def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
