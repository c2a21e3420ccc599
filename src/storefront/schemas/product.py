"""Product schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class VariantCreate(BaseModel):
    size: str = Field(..., min_length=1, max_length=20)
    color: str | None = Field(None, max_length=50)
    price: Decimal = Field(..., ge=0)


class ColorImageCreate(BaseModel):
    color: str = Field(..., min_length=1, max_length=50)
    image_path: str = Field(..., max_length=500)
    thumbnail_path: str | None = Field(None, max_length=500)


class ProductCreate(BaseModel):
    """Schema for product creation request."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    campaign_id: UUID
    brand_id: UUID | None = None
    variants: list[VariantCreate] = Field(..., min_length=1)
    color_images: list[ColorImageCreate] = []


class ProductUpdate(BaseModel):
    """Partial product update; ``variant_prices`` reprices existing variants.

    Fields sent as null are ignored.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)
    campaign_id: UUID | None = None
    brand_id: UUID | None = None
    variant_prices: dict[UUID, Decimal] = {}


class VariantResponse(BaseModel):
    variant_id: UUID
    size: str
    color: str | None
    price: Decimal

    model_config = {"from_attributes": True}


class ColorImageResponse(BaseModel):
    image_id: UUID
    color: str
    image_path: str
    thumbnail_path: str | None

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    """Schema for product response."""

    product_id: UUID
    name: str
    description: str | None
    price: Decimal
    campaign_id: UUID | None
    brand_id: UUID | None
    colors: list[str]
    variants: list[VariantResponse]
    color_images: list[ColorImageResponse]
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    """Schema for product list response."""

    products: list[ProductResponse]
    total: int


class AdminProductResponse(ProductResponse):
    """Product with the units ordered so far, for the admin catalog."""

    units_sold: int = 0


class AdminProductListResponse(BaseModel):
    products: list[AdminProductResponse]
    total: int
