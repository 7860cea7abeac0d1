"""
Cart model and cart aggregation.

A Cart is owned by one browsing session. Every change goes through
add_item / update_quantity / remove_item / clear_cart, and each change is
written to the key-value store before it becomes visible in memory, so a
failed write leaves the cart as it was.

Money is whole rupees in Python ints; totals never touch floating point.
"""

import json
from typing import Iterable, Optional
import structlog

from config import settings
from models.cart import CartLineItem
from models.order import OrderLineItem
from exceptions import ValidationError
from services.cart_store import KeyValueStore, get_cart_store
from services.product_service import ProductService, get_product_service

logger = structlog.get_logger(__name__)


# ===================
# AGGREGATION
# ===================

def calculate_cart_total(items: Iterable[CartLineItem]) -> int:
    """Sum of unit_price * quantity. 0 for an empty cart."""
    return sum((item.line_total for item in items), 0)


def calculate_cart_count(items: Iterable[CartLineItem]) -> int:
    """Total units across all lines."""
    return sum((item.quantity for item in items), 0)


def cart_items_to_order_items(items: Iterable[CartLineItem]) -> list[OrderLineItem]:
    """
    Snapshot cart lines as order lines, preserving order.

    This is the only path from cart state to an order payload.
    """
    return [
        OrderLineItem(
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.unit_price,
        )
        for item in items
    ]


# ===================
# PERSISTENCE FORMAT
# ===================

def serialize_cart_items(items: Iterable[CartLineItem]) -> str:
    """
    Encode cart lines as JSON text.

    product_id and unit_price are written as decimal strings so they
    survive any JSON reader without precision loss.
    """
    return json.dumps(
        [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "brand": item.brand,
                "category": item.category,
                "unit_price": str(item.unit_price),
                "quantity": item.quantity,
                "image_url": item.image_url,
            }
            for item in items
        ],
        ensure_ascii=False
    )


def deserialize_cart_items(raw: Optional[str]) -> list[CartLineItem]:
    """
    Decode stored cart text.

    Missing or unreadable data yields an empty cart. Repeated product ids
    are merged into one line.
    """
    if not raw:
        return []

    try:
        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise ValueError("stored cart is not a list")
        loaded = [CartLineItem.model_validate(entry) for entry in payload]
    except (ValueError, TypeError) as e:
        logger.warning("stored_cart_unreadable", error=str(e))
        return []

    merged: list[CartLineItem] = []
    positions: dict[int, int] = {}
    for item in loaded:
        if item.product_id in positions:
            existing = merged[positions[item.product_id]]
            existing.quantity = existing.quantity + item.quantity
        else:
            positions[item.product_id] = len(merged)
            merged.append(item)

    return merged


# ===================
# CART
# ===================

class Cart:
    """
    Line items for one session, persisted under a single key.

    Reads return copies; callers cannot change the cart except through
    the mutation methods.
    """

    def __init__(self, store: KeyValueStore, storage_key: str):
        self._store = store
        self.storage_key = storage_key
        self._items: list[CartLineItem] = deserialize_cart_items(store.get(storage_key))

        logger.debug(
            "cart_loaded",
            storage_key=storage_key,
            line_count=len(self._items)
        )

    # ===================
    # READ OPERATIONS
    # ===================

    @property
    def items(self) -> list[CartLineItem]:
        return [item.model_copy() for item in self._items]

    @property
    def item_count(self) -> int:
        return calculate_cart_count(self._items)

    @property
    def total(self) -> int:
        return calculate_cart_total(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, product_id: int) -> Optional[CartLineItem]:
        """Copy of the line for product_id, or None."""
        idx = self._index_of(product_id)
        if idx is None:
            return None
        return self._items[idx].model_copy()

    # ===================
    # WRITE OPERATIONS
    # ===================

    def add_item(self, item: CartLineItem) -> CartLineItem:
        """
        Add a line, or merge into the existing line for the same product.

        On merge only the quantity changes; the stored name and price are
        kept.

        Returns:
            Copy of the resulting line
        """
        items = list(self._items)
        idx = self._index_of(item.product_id)

        if idx is None:
            line = item.model_copy()
            items.append(line)
        else:
            line = items[idx].model_copy()
            line.quantity = line.quantity + item.quantity
            items[idx] = line

        self._commit(items)

        logger.info(
            "cart_item_added",
            storage_key=self.storage_key,
            product_id=item.product_id,
            quantity=line.quantity,
            merged=idx is not None
        )

        return line.model_copy()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """Set a line's quantity. Zero or less removes it; unknown ids are ignored."""
        if quantity <= 0:
            self.remove_item(product_id)
            return

        idx = self._index_of(product_id)
        if idx is None:
            return

        items = list(self._items)
        line = items[idx].model_copy()
        line.quantity = quantity
        items[idx] = line

        self._commit(items)

        logger.info(
            "cart_quantity_updated",
            storage_key=self.storage_key,
            product_id=product_id,
            quantity=quantity
        )

    def remove_item(self, product_id: int) -> None:
        """Drop a line if present."""
        if self._index_of(product_id) is None:
            return

        self._commit([item for item in self._items if item.product_id != product_id])

        logger.info(
            "cart_item_removed",
            storage_key=self.storage_key,
            product_id=product_id
        )

    def clear_cart(self) -> None:
        """Remove every line."""
        self._commit([])
        logger.info("cart_cleared", storage_key=self.storage_key)

    # ===================
    # HELPERS
    # ===================

    def _index_of(self, product_id: int) -> Optional[int]:
        for idx, item in enumerate(self._items):
            if item.product_id == product_id:
                return idx
        return None

    def _commit(self, items: list[CartLineItem]) -> None:
        """Persist first, then swap the in-memory list."""
        self._store.set(self.storage_key, serialize_cart_items(items))
        self._items = items


# ===================
# SESSION CARTS
# ===================

class CartService:
    """
    Hands out one Cart per session and snapshots products into it.

    Nothing is held between calls: each lookup reads the cart from the
    store, so every worker sees the latest write.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        product_service: Optional[ProductService] = None
    ):
        self.store = store or get_cart_store()
        self._product_service = product_service

    @property
    def products(self) -> ProductService:
        if self._product_service is None:
            self._product_service = get_product_service()
        return self._product_service

    def storage_key_for(self, session_id: str) -> str:
        return f"{settings.cart_storage_key}:{session_id}"

    def get_cart(self, session_id: str) -> Cart:
        """Cart for a session, freshly loaded from the store."""
        return Cart(self.store, self.storage_key_for(session_id))

    def add_product(self, session_id: str, product_id: int, quantity: int = 1) -> CartLineItem:
        """
        Add a catalog product to a session cart.

        Name, brand, category, price and image are copied from the product
        as it is now.

        Raises:
            ProductNotFoundError: Unknown product
            ValidationError: Quantity out of range
        """
        cart = self.get_cart(session_id)
        existing = cart.get_item(product_id)
        resulting = quantity + (existing.quantity if existing else 0)
        self._check_quantity(quantity)
        self._check_quantity(resulting)

        product = self.products.get_by_id(product_id)

        return cart.add_item(CartLineItem(
            product_id=product.id,
            name=product.name,
            brand=product.brand,
            category=product.category,
            unit_price=product.price,
            quantity=quantity,
            image_url=product.image_url,
        ))

    def set_quantity(self, session_id: str, product_id: int, quantity: int) -> Cart:
        """Change a line's quantity; zero or less removes it."""
        if quantity > 0:
            self._check_quantity(quantity)
        cart = self.get_cart(session_id)
        cart.update_quantity(product_id, quantity)
        return cart

    def _check_quantity(self, quantity: int) -> None:
        if quantity < 1 or quantity > settings.max_line_quantity:
            raise ValidationError(
                code="INVALID_QUANTITY",
                message=f"Quantity must be between 1 and {settings.max_line_quantity}",
                details={"quantity": quantity}
            )


# Singleton instance for convenience
_cart_service: Optional[CartService] = None

def get_cart_service() -> CartService:
    """Get or create CartService instance."""
    global _cart_service
    if _cart_service is None:
        _cart_service = CartService()
    return _cart_service
