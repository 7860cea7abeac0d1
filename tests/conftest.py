"""
Shared test fixtures.

The mock Supabase client keeps rows per table in memory and applies eq
filters, ordering and ranges, so services can be exercised end to end
without a database.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are read at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("CART_STORE_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from unittest.mock import patch
from contextlib import ExitStack
from datetime import datetime
from typing import Generator, Optional

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._action = "select"
        self._payload = None
        self._on_conflict = None
        self._filters = []
        self._order = None
        self._range = None
        self._limit = None
        self._count = None

    def select(self, *args, count: Optional[str] = None, **kwargs):
        self._count = count
        return self

    def insert(self, data):
        self._action = "insert"
        self._payload = data
        return self

    def upsert(self, data, on_conflict: Optional[str] = None, **kwargs):
        self._action = "upsert"
        self._payload = data
        self._on_conflict = on_conflict or "id"
        return self

    def update(self, data):
        self._action = "update"
        self._payload = data
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._table.error is not None:
            raise self._table.error

        if self._action == "insert":
            return MockSupabaseResponse(data=self._table.add_rows(self._payload))
        if self._action == "upsert":
            return MockSupabaseResponse(
                data=self._table.upsert_rows(self._payload, self._on_conflict)
            )

        matched = [row for row in self._table.rows if self._matches(row)]

        if self._action == "update":
            for row in matched:
                row.update(self._payload)
            return MockSupabaseResponse(data=[dict(r) for r in matched])

        total = len(matched)
        if self._order:
            column, desc = self._order
            matched = sorted(
                matched,
                key=lambda r: (
                    r.get(column) is None,
                    r.get(column) if r.get(column) is not None else ""
                ),
                reverse=desc
            )
        if self._range:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._limit is not None:
            matched = matched[:self._limit]

        return MockSupabaseResponse(
            data=[dict(r) for r in matched],
            count=total if self._count else None
        )

    def _matches(self, row: dict) -> bool:
        return all(
            row.get(column) == value or str(row.get(column)) == str(value)
            for column, value in self._filters
        )


class MockSupabaseTable:
    """In-memory table."""

    def __init__(self, rows: list = None):
        self.rows = [dict(r) for r in (rows or [])]
        self.error: Optional[Exception] = None
        self.insert_calls = 0

    def _next_id(self) -> int:
        ids = [r["id"] for r in self.rows if isinstance(r.get("id"), int)]
        return max(ids, default=0) + 1

    def add_rows(self, data) -> list:
        self.insert_calls += 1
        items = data if isinstance(data, list) else [data]
        created = []
        for item in items:
            row = dict(item)
            row.setdefault("id", self._next_id())
            row.setdefault("created_at", datetime.utcnow().isoformat() + "Z")
            self.rows.append(row)
            created.append(dict(row))
        return created

    def upsert_rows(self, data, on_conflict: str) -> list:
        items = data if isinstance(data, list) else [data]
        result = []
        for item in items:
            existing = next(
                (r for r in self.rows if r.get(on_conflict) == item.get(on_conflict)),
                None
            )
            if existing is None:
                self.rows.append(dict(item))
                result.append(dict(item))
            else:
                existing.update(item)
                result.append(dict(existing))
        return result


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Replace the rows of a table."""
        self._tables[table_name] = MockSupabaseTable(data)

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise error."""
        self._get(table_name).error = error

    def rows(self, table_name: str) -> list:
        return self._get(table_name).rows

    def table(self, name: str) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._get(name))

    def _get(self, name: str) -> MockSupabaseTable:
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


SERVICE_CLIENT_TARGETS = (
    "config.database.get_supabase_client",
    "services.product_service.get_supabase_client",
    "services.order_service.get_supabase_client",
    "services.inquiry_service.get_supabase_client",
    "services.admin_service.get_supabase_client",
    "services.cart_store.get_supabase_client",
)

SINGLETONS = (
    ("services.product_service", "_product_service"),
    ("services.order_service", "_order_service"),
    ("services.checkout_service", "_checkout_service"),
    ("services.inquiry_service", "_inquiry_service"),
    ("services.admin_service", "_admin_service"),
    ("services.cart_service", "_cart_service"),
    ("services.cart_store", "_cart_store"),
)


def _reset_singletons():
    import importlib
    for module_name, attr in SINGLETONS:
        setattr(importlib.import_module(module_name), attr, None)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": 1, "name": "iPhone 14", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch every database client lookup with the mock.

    Service singletons are reset so they pick up the mock.
    """
    _reset_singletons()
    with ExitStack() as stack:
        for target in SERVICE_CLIENT_TARGETS:
            stack.enter_context(patch(target, return_value=mock_supabase))
        stack.enter_context(
            patch("services.admin_service.get_admin_client", return_value=None)
        )
        yield mock_supabase
    _reset_singletons()


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product row."""
    return {
        "id": 1,
        "name": "iPhone 14",
        "brand": "Apple",
        "category": "Smartphone",
        "price": 69999,
        "image_url": "https://cdn.example.com/iphone14.png",
        "description": "128 GB, Midnight",
        "created_at": "2026-01-05T10:00:00Z"
    }


@pytest.fixture
def sample_products_list() -> list:
    """Sample product rows."""
    return [
        {
            "id": 1,
            "name": "iPhone 14",
            "brand": "Apple",
            "category": "Smartphone",
            "price": 69999,
            "image_url": None,
            "description": None,
            "created_at": "2026-01-05T10:00:00Z"
        },
        {
            "id": 2,
            "name": "Galaxy S23",
            "brand": "Samsung",
            "category": "Smartphone",
            "price": 74999,
            "image_url": "https://cdn.example.com/s23.png",
            "description": "",
            "created_at": "2026-01-05T10:00:00Z"
        },
        {
            "id": 3,
            "name": "Redmi Buds 4",
            "brand": "Xiaomi",
            "category": "Audio",
            "price": 2999,
            "image_url": None,
            "description": "Wireless earbuds",
            "created_at": "2026-01-05T10:00:00Z"
        }
    ]


@pytest.fixture
def sample_customer() -> dict:
    """Customer details as entered at checkout."""
    return {
        "name": "Asha Verma",
        "phone": "+91 98765-43210",
        "email": "asha@example.in",
        "address": "12 MG Road, Bengaluru 560001"
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/products")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin():
    """Let every request through the admin check."""
    from main import app
    from routes.dependencies import require_admin

    app.dependency_overrides[require_admin] = lambda: "admin-principal"
    yield "admin-principal"
    app.dependency_overrides.pop(require_admin, None)
