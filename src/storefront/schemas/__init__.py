"""Pydantic schemas for request/response validation."""

from storefront.schemas.brand import BrandCreate, BrandResponse
from storefront.schemas.campaign import CampaignCreate, CampaignListResponse, CampaignResponse
from storefront.schemas.cart import CartLineAdd, CartLineUpdate, CartResponse
from storefront.schemas.feedback import FeedbackCreate, FeedbackResponse
from storefront.schemas.order import (
    CampaignSalesResponse,
    LineStatusUpdate,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
)
from storefront.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "BrandCreate",
    "BrandResponse",
    "CampaignCreate",
    "CampaignResponse",
    "CampaignListResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "CartLineAdd",
    "CartLineUpdate",
    "CartResponse",
    "OrderCreate",
    "OrderResponse",
    "OrderListResponse",
    "LineStatusUpdate",
    "CampaignSalesResponse",
    "FeedbackCreate",
    "FeedbackResponse",
]
