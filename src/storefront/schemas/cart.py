"""Cart schemas for request/response validation."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class CartLineAdd(BaseModel):
    """Schema for adding a variant to the cart.

    Quantity bounds are enforced by the cart service so that an out of range
    value is reported as INVALID_QUANTITY.
    """

    product_id: UUID
    variant_id: UUID
    color: str | None = Field(None, max_length=50)
    quantity: int = 1


class CartLineUpdate(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    line_id: UUID
    product_id: UUID
    variant_id: UUID
    product_name: str
    size: str
    color: str | None
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


class CartResponse(BaseModel):
    """Current cart contents.

    ``removed_line_ids`` lists lines dropped because their campaign ended.
    """

    lines: list[CartLineResponse]
    total: Decimal
    item_count: int
    removed_line_ids: list[UUID] = []


class CartSessionResponse(BaseModel):
    session_id: str
    header: str
