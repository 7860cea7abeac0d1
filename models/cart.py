"""
Cart schemas.

A CartLineItem is the persisted cart entry: a snapshot of the product taken
when it was first added, plus the quantity. Money stays an exact int.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema, none_if_blank, reject_float


class CartLineItem(BaseSchema):
    """One product entry in a cart, keyed by product_id."""

    product_id: int = Field(..., ge=0, description="Product id (unique within a cart)")
    name: str
    brand: str
    category: str
    unit_price: int = Field(..., ge=0, description="Unit price in whole rupees")
    quantity: int = Field(..., ge=1, description="Units of this product")
    image_url: Optional[str] = None

    @field_validator("product_id", "unit_price", "quantity", mode="before")
    @classmethod
    def exact_numbers(cls, v):
        return reject_float(v)

    @field_validator("image_url", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return none_if_blank(v)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class CartItemAdd(BaseSchema):
    """Request body for adding a product to the cart."""

    product_id: int = Field(..., ge=0)
    quantity: int = Field(1, ge=1)

    @field_validator("product_id", "quantity", mode="before")
    @classmethod
    def exact_numbers(cls, v):
        return reject_float(v)


class CartQuantityUpdate(BaseSchema):
    """Request body for changing a line quantity. Zero or less removes the line."""

    quantity: int


class CartResponse(BaseSchema):
    """Cart contents with aggregates."""

    items: list[CartLineItem]
    item_count: int
    total: int
    total_display: str
