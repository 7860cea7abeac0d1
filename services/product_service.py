"""
Product service for catalog operations.

Products live in the products table:
    products(id bigint, name, brand, category, price bigint,
             image_url, description, created_at)
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union
import structlog

from pydantic import ValidationError as SchemaValidationError

from config import get_supabase_client
from models.product import ProductCreate, ProductResponse
from parsers.product_import_parser import ProductCandidate
from exceptions import (
    ProductNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


@dataclass
class BulkCreateResult:
    """
    Outcome of bulk_create.

    Each row is inserted on its own; a failing row does not stop the rest.
    """
    created: list[tuple[int, int]] = field(default_factory=list)  # (row, id)
    failed: list[tuple[int, str, str]] = field(default_factory=list)  # (row, name, error)

    @property
    def created_ids(self) -> list[int]:
        return [product_id for _, product_id in self.created]


class ProductService:
    """
    Product business logic.

    Handles listing, lookup, creation and bulk import of products.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> list[ProductResponse]:
        """
        Get every product, ordered by name.

        Returns:
            List of ProductResponse
        """
        logger.info("getting_products")

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("name")
                .execute()
            )

            products = [ProductResponse(**row) for row in result.data]

            logger.info("products_retrieved", count=len(products))

            return products

        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: int) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ProductCreate) -> int:
        """
        Create a new product.

        Returns:
            Id assigned by the store
        """
        logger.info(
            "creating_product",
            name=data.name,
            brand=data.brand,
            price=data.price
        )

        try:
            result = (
                self.db.table(self.table)
                .insert(self._insert_data(data))
                .execute()
            )
        except Exception as e:
            logger.error(
                "create_product_failed",
                name=data.name,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned")

        product_id = int(result.data[0]["id"])

        logger.info("product_created", product_id=product_id, name=data.name)

        return product_id

    def bulk_create(
        self,
        products: Iterable[Union[ProductCandidate, tuple[int, ProductCreate]]]
    ) -> BulkCreateResult:
        """
        Create many products, continuing past individual failures.

        Accepts parser candidates (already filtered to importable ones) or
        (row, ProductCreate) pairs. Rows are inserted in the given order.

        Returns:
            BulkCreateResult with created (row, id) pairs and failures
        """
        entries = list(products)

        logger.info("bulk_create_products", count=len(entries))

        outcome = BulkCreateResult()

        for item in entries:
            if not isinstance(item, ProductCandidate):
                row, data = item
            else:
                row = item.row
                try:
                    data = item.to_product_create()
                except SchemaValidationError as e:
                    message = "; ".join(err["msg"] for err in e.errors())
                    logger.error(
                        "bulk_create_product_invalid",
                        row=row,
                        name=item.name,
                        error=message
                    )
                    outcome.failed.append((row, item.name, message))
                    continue

            try:
                product_id = self.create(data)
                outcome.created.append((row, product_id))
            except DatabaseError as e:
                logger.error(
                    "bulk_create_product_failed",
                    row=row,
                    name=data.name,
                    error=e.message
                )
                outcome.failed.append((row, data.name, e.message))
                # Continue with next product
                continue

        logger.info(
            "bulk_create_complete",
            created=len(outcome.created),
            failed=len(outcome.failed)
        )
        return outcome

    # ===================
    # HELPERS
    # ===================

    def _insert_data(self, data: ProductCreate) -> dict:
        return {
            "name": data.name,
            "brand": data.brand,
            "category": data.category,
            "price": data.price,
            "image_url": data.image_url,
            "description": data.description,
        }


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
