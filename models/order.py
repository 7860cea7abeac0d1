"""
Order schemas for validation and serialization.

See services/order_service.py for how orders are stored.
"""

import re
from pydantic import ConfigDict, Field, computed_field, field_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin, reject_float
from utils.currency import format_inr

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CustomerDetails(BaseSchema):
    """Contact and delivery details captured at checkout."""

    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=40)
    email: str = Field(..., min_length=1, max_length=320)
    address: str = Field(..., min_length=1, max_length=1000)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: str) -> str:
        if not PHONE_PATTERN.match(v):
            raise ValueError("Please enter a valid phone number")
        return v

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v


class OrderLineItem(BaseSchema):
    """
    Immutable order line.

    Built from a cart line at submission time; later cart edits cannot
    reach it.
    """
    model_config = ConfigDict(frozen=True)

    product_id: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0, description="Unit price in whole rupees")

    @field_validator("product_id", "quantity", "price", mode="before")
    @classmethod
    def exact_numbers(cls, v):
        return reject_float(v)


class OrderCreate(BaseSchema):
    """Place an order with explicit line items."""

    customer_details: CustomerDetails
    items: list[OrderLineItem] = Field(..., min_length=1)


class CheckoutRequest(BaseSchema):
    """Place an order from the session cart."""

    customer_details: CustomerDetails


class OrderResponse(BaseSchema, TimestampMixin):
    """Order as stored."""

    id: int
    customer_details: CustomerDetails
    items: list[OrderLineItem]
    total_amount: int

    @computed_field
    @property
    def total_display(self) -> str:
        return format_inr(self.total_amount)


class OrderListResponse(BaseSchema):
    """All orders, newest first."""

    data: list[OrderResponse]
    total: int


class OrderPlacedResponse(BaseSchema):
    """Id returned after a successful order placement."""

    order_id: int
    total_amount: Optional[int] = None
