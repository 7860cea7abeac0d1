"""
Product schemas for validation and serialization.

Prices are whole rupees held as int.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin, none_if_blank, reject_float


# Largest value a bigint price column holds
MAX_PRICE = 2**63 - 1

MAX_LENGTHS = {
    "name": 200,
    "brand": 100,
    "category": 100,
    "image_url": 2000,
    "description": 5000,
}


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: name, brand, category, price
    Optional: image_url, description
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_LENGTHS["name"],
        description="Product name",
        examples=["iPhone 14"]
    )
    brand: str = Field(
        ...,
        min_length=1,
        max_length=MAX_LENGTHS["brand"],
        description="Manufacturer / brand",
        examples=["Apple"]
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=MAX_LENGTHS["category"],
        description="Product category",
        examples=["Smartphone"]
    )
    price: int = Field(
        ...,
        gt=0,
        le=MAX_PRICE,
        description="Unit price in whole rupees"
    )
    image_url: Optional[str] = Field(
        None,
        max_length=MAX_LENGTHS["image_url"],
        description="Product image URL"
    )
    description: Optional[str] = Field(
        None,
        max_length=MAX_LENGTHS["description"],
        description="Long description"
    )

    @field_validator("price", mode="before")
    @classmethod
    def price_exact(cls, v):
        return reject_float(v)

    @field_validator("image_url", "description", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return none_if_blank(v)


class ProductResponse(BaseSchema, TimestampMixin):
    """Product as stored."""

    id: int = Field(..., description="Product id")
    name: str
    brand: str
    category: str
    price: int = Field(..., ge=0, description="Unit price in whole rupees")
    image_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("image_url", "description", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return none_if_blank(v)


class ProductListResponse(BaseSchema):
    """List of products."""

    data: list[ProductResponse]
    total: int


class ProductCreatedResponse(BaseSchema):
    """Id assigned to a newly created product."""

    id: int
