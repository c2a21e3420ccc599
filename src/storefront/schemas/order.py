"""Order schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class OrderCreate(BaseModel):
    notes: str | None = Field(None, max_length=2000)
    phone: str | None = Field(None, max_length=20)


class LineStatusUpdate(BaseModel):
    """Partial status update; values are checked by the status state machine."""

    payment_status: str | None = None
    stock_status: str | None = None


class MarkProcessedRequest(BaseModel):
    line_ids: list[UUID] = Field(..., min_length=1)


class OrderLineResponse(BaseModel):
    line_id: UUID
    product_id: UUID
    variant_id: UUID | None
    product_name: str
    size: str | None
    color: str | None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    payment_status: str
    stock_status: str
    is_processed: bool
    processed_at: datetime | None


class OrderResponse(BaseModel):
    """Schema for order response.

    ``status`` is derived from the line statuses and the payment marker.
    """

    order_id: UUID
    user_id: UUID
    phone: str | None
    notes: str | None
    status: str
    payment_status: str
    notifications_sent: int
    total: Decimal
    total_quantity: int
    created_at: datetime
    lines: list[OrderLineResponse]


class OrderListResponse(BaseModel):
    """Schema for order list response."""

    orders: list[OrderResponse]
    total: int


class CampaignOrderSummary(BaseModel):
    order_id: UUID
    user_id: UUID
    customer_name: str | None
    phone: str | None
    created_at: datetime
    campaign_units: int
    total: Decimal


class CampaignOrdersResponse(BaseModel):
    """Orders containing at least one product of the campaign."""

    campaign_id: UUID
    orders: list[CampaignOrderSummary]
    total: int


class ProductSales(BaseModel):
    product_id: UUID
    product_name: str
    units: int
    revenue: Decimal


class CampaignSalesResponse(BaseModel):
    """Sales of a campaign over non-cancelled order lines."""

    campaign_id: UUID
    total_revenue: Decimal
    total_units: int
    products: list[ProductSales]
