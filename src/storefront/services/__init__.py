"""Business logic services."""

from storefront.services.brand_service import BrandService
from storefront.services.campaign_service import CampaignService
from storefront.services.cart_service import CartOwner, CartService
from storefront.services.feedback_service import FeedbackService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.redis_service import RedisService
from storefront.services.user_service import UserService

__all__ = [
    "BrandService",
    "CampaignService",
    "CartOwner",
    "CartService",
    "FeedbackService",
    "OrderService",
    "ProductService",
    "RedisService",
    "UserService",
]
