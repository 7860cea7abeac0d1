"""
Unit tests for the cart model and cart aggregation.
"""

import json
import pytest

from services.cart_service import (
    Cart,
    CartService,
    calculate_cart_total,
    calculate_cart_count,
    cart_items_to_order_items,
    serialize_cart_items,
    deserialize_cart_items,
)
from services.cart_store import MemoryKeyValueStore
from services.product_service import ProductService
from exceptions import DatabaseError, ProductNotFoundError, ValidationError

from tests.factories import CartItemFactory, ProductFactory


# ===================
# FIXTURES
# ===================

class RecordingStore(MemoryKeyValueStore):
    """Memory store that counts writes."""

    def __init__(self):
        super().__init__()
        self.writes = 0

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


class FailingStore(MemoryKeyValueStore):
    """Memory store whose writes fail once armed."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def set(self, key, value):
        if self.fail:
            raise DatabaseError("upsert", "store unreachable")
        super().set(key, value)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def cart(store):
    return Cart(store, "telesystem-cart:test")


# ===================
# AGGREGATION
# ===================

class TestAggregation:
    """Tests for the pure total/count/convert functions."""

    def test_total_and_count(self):
        """(1000 x 2) + (500 x 1) = 2500 over 3 units."""
        items = [
            CartItemFactory.create(product_id=1, unit_price=1000, quantity=2),
            CartItemFactory.create(product_id=2, unit_price=500, quantity=1),
        ]

        assert calculate_cart_total(items) == 2500
        assert calculate_cart_count(items) == 3

    def test_empty_cart(self):
        assert calculate_cart_total([]) == 0
        assert calculate_cart_count([]) == 0

    def test_total_is_exact_for_large_amounts(self):
        items = [CartItemFactory.create(unit_price=10**17 + 1, quantity=999)]

        assert calculate_cart_total(items) == (10**17 + 1) * 999

    def test_order_items_sum_to_cart_total(self):
        items = [
            CartItemFactory.create(product_id=1, unit_price=69999, quantity=2),
            CartItemFactory.create(product_id=7, unit_price=2999, quantity=3),
            CartItemFactory.create(product_id=4, unit_price=0, quantity=1),
        ]

        order_items = cart_items_to_order_items(items)

        assert [o.product_id for o in order_items] == [1, 7, 4]
        assert sum(o.price * o.quantity for o in order_items) == calculate_cart_total(items)


# ===================
# CART OPERATIONS
# ===================

class TestCartAddItem:
    """Tests for Cart.add_item()"""

    def test_same_product_merges(self, cart):
        """Adding quantities 2 then 3 gives one line of 5."""
        cart.add_item(CartItemFactory.create(product_id=9, quantity=2))
        cart.add_item(CartItemFactory.create(product_id=9, quantity=3))

        assert len(cart.items) == 1
        assert cart.get_item(9).quantity == 5

    def test_merge_keeps_first_snapshot(self, cart):
        cart.add_item(CartItemFactory.create(product_id=9, unit_price=1000, name="Old name"))
        cart.add_item(CartItemFactory.create(product_id=9, unit_price=1200, name="New name"))

        line = cart.get_item(9)
        assert line.unit_price == 1000
        assert line.name == "Old name"
        assert line.quantity == 2

    def test_insertion_order_preserved(self, cart):
        for product_id in (3, 1, 2):
            cart.add_item(CartItemFactory.create(product_id=product_id))
        cart.add_item(CartItemFactory.create(product_id=1))

        assert [i.product_id for i in cart.items] == [3, 1, 2]

    def test_returned_items_are_copies(self, cart):
        cart.add_item(CartItemFactory.create(product_id=1, quantity=2))

        cart.items[0].quantity = 50
        cart.get_item(1).quantity = 60

        assert cart.get_item(1).quantity == 2
        assert cart.item_count == 2


class TestCartUpdateAndRemove:
    """Tests for update_quantity(), remove_item() and clear_cart()"""

    def test_update_to_zero_equals_remove(self, store):
        updated = Cart(store, "k1")
        removed = Cart(store, "k2")
        for c in (updated, removed):
            c.add_item(CartItemFactory.create(product_id=1, quantity=2))
            c.add_item(CartItemFactory.create(product_id=2, quantity=1))

        updated.update_quantity(1, 0)
        removed.remove_item(1)

        assert updated.items == removed.items
        assert [i.product_id for i in updated.items] == [2]

    def test_negative_quantity_removes(self, cart):
        cart.add_item(CartItemFactory.create(product_id=1))

        cart.update_quantity(1, -3)

        assert cart.get_item(1) is None

    def test_update_replaces_quantity(self, cart):
        cart.add_item(CartItemFactory.create(product_id=1, quantity=2))

        cart.update_quantity(1, 7)

        assert cart.get_item(1).quantity == 7

    def test_missing_ids_are_noops_without_writes(self, cart, store):
        cart.add_item(CartItemFactory.create(product_id=1))
        writes = store.writes

        cart.update_quantity(42, 3)
        cart.update_quantity(42, 0)
        cart.remove_item(42)

        assert store.writes == writes
        assert cart.item_count == 1

    def test_clear_cart(self, cart):
        cart.add_item(CartItemFactory.create(product_id=1, quantity=4))

        cart.clear_cart()

        assert cart.items == []
        assert cart.item_count == 0
        assert cart.total == 0
        assert cart.is_empty()


# ===================
# PERSISTENCE
# ===================

class TestCartPersistence:
    """Tests for writing carts to and reading them from the store."""

    def test_round_trip(self, store):
        cart = Cart(store, "telesystem-cart:s1")
        cart.add_item(CartItemFactory.create(product_id=1, unit_price=69999, quantity=2))
        cart.add_item(CartItemFactory.create(product_id=2, unit_price=10**18, quantity=1, image_url="https://x/y.png"))

        reloaded = Cart(store, "telesystem-cart:s1")

        assert reloaded.items == cart.items
        assert reloaded.total == 2 * 69999 + 10**18

    def test_money_and_ids_stored_as_strings(self, cart, store):
        cart.add_item(CartItemFactory.create(product_id=12, unit_price=79999, quantity=3))

        stored = json.loads(store.get(cart.storage_key))

        assert stored[0]["product_id"] == "12"
        assert stored[0]["unit_price"] == "79999"
        assert stored[0]["quantity"] == 3

    def test_every_mutation_is_written(self, cart, store):
        cart.add_item(CartItemFactory.create(product_id=1))
        cart.update_quantity(1, 3)
        cart.remove_item(1)
        cart.clear_cart()

        assert store.writes == 4
        assert json.loads(store.get(cart.storage_key)) == []

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"product_id": "1"}',
        '[{"product_id": "1", "name": "x", "brand": "b", "category": "c", "unit_price": 99.5, "quantity": 1}]',
        '[{"product_id": "1"}]',
        "[1, 2, 3]",
    ])
    def test_unreadable_data_loads_empty(self, raw):
        store = MemoryKeyValueStore()
        store.set("k", raw)

        cart = Cart(store, "k")

        assert cart.items == []

    def test_missing_key_loads_empty(self):
        assert Cart(MemoryKeyValueStore(), "nothing-here").items == []

    def test_duplicate_ids_merged_on_load(self):
        line = {"product_id": "5", "name": "Pixel 8", "brand": "Google",
                "category": "Smartphone", "unit_price": "59999", "quantity": 1}
        raw = json.dumps([line, {**line, "quantity": 2}])

        items = deserialize_cart_items(raw)

        assert len(items) == 1
        assert items[0].quantity == 3
        assert items[0].unit_price == 59999

    def test_serialize_then_deserialize_preserves_values(self):
        items = [CartItemFactory.create(product_id=3, unit_price=123456789012345678, quantity=4)]

        assert deserialize_cart_items(serialize_cart_items(items)) == items

    def test_failed_write_leaves_cart_unchanged(self):
        store = FailingStore()
        cart = Cart(store, "k")
        cart.add_item(CartItemFactory.create(product_id=1, quantity=2))
        store.fail = True

        with pytest.raises(DatabaseError):
            cart.add_item(CartItemFactory.create(product_id=1, quantity=5))
        with pytest.raises(DatabaseError):
            cart.clear_cart()

        assert cart.get_item(1).quantity == 2
        assert cart.item_count == 2


# ===================
# CART SERVICE
# ===================

class TestCartService:
    """Tests for CartService"""

    def test_add_product_snapshots_catalog_fields(self, mock_db, mock_supabase, sample_product_data):
        mock_supabase.set_table_data("products", [sample_product_data])
        service = CartService(store=MemoryKeyValueStore(), product_service=ProductService())

        line = service.add_product("session-1", 1, 2)

        assert line.name == "iPhone 14"
        assert line.brand == "Apple"
        assert line.unit_price == 69999
        assert line.quantity == 2
        assert line.image_url == "https://cdn.example.com/iphone14.png"

    def test_carts_are_per_session(self, mock_db, mock_supabase, sample_product_data):
        mock_supabase.set_table_data("products", [sample_product_data])
        store = MemoryKeyValueStore()
        service = CartService(store=store, product_service=ProductService())

        service.add_product("session-1", 1)

        assert service.get_cart("session-2").items == []
        assert store.get("telesystem-cart:session-1") is not None

    def test_workers_sharing_a_store_see_each_others_writes(self, mock_db, mock_supabase, sample_product_data):
        mock_supabase.set_table_data("products", [sample_product_data])
        store = MemoryKeyValueStore()
        worker_a = CartService(store=store, product_service=ProductService())
        worker_b = CartService(store=store, product_service=ProductService())

        assert worker_b.get_cart("session-1").items == []
        worker_a.add_product("session-1", 1, 2)
        worker_b.add_product("session-1", 1, 1)

        assert worker_a.get_cart("session-1").get_item(1).quantity == 3

    def test_no_per_session_state_is_kept(self, mock_db, mock_supabase):
        service = CartService(store=MemoryKeyValueStore(), product_service=ProductService())

        first = service.get_cart("session-1")
        for n in range(50):
            service.get_cart(f"session-{n}")

        assert service.get_cart("session-1") is not first
        assert not any(isinstance(v, dict) for v in vars(service).values())

    def test_unknown_product(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [])
        service = CartService(store=MemoryKeyValueStore(), product_service=ProductService())

        with pytest.raises(ProductNotFoundError):
            service.add_product("session-1", 404)

    def test_quantity_ceiling(self, mock_db, mock_supabase):
        product = ProductFactory.create(id=8)
        mock_supabase.set_table_data("products", [product])
        service = CartService(store=MemoryKeyValueStore(), product_service=ProductService())
        service.add_product("s", 8, 990)

        with pytest.raises(ValidationError):
            service.add_product("s", 8, 10)
        with pytest.raises(ValidationError):
            service.set_quantity("s", 8, 1000)

        assert service.get_cart("s").get_item(8).quantity == 990

    def test_set_quantity_zero_removes(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(id=8)])
        service = CartService(store=MemoryKeyValueStore(), product_service=ProductService())
        service.add_product("s", 8, 2)

        cart = service.set_quantity("s", 8, 0)

        assert cart.items == []
