"""SQLAlchemy ORM models."""

from storefront.models.base import TimestampMixin
from storefront.models.brand import Brand
from storefront.models.campaign import Campaign
from storefront.models.cart import CartLine
from storefront.models.feedback import Feedback
from storefront.models.order import Order, OrderLine
from storefront.models.product import Product, ProductColorImage, ProductVariant
from storefront.models.user import User

__all__ = [
    "TimestampMixin",
    "User",
    "Brand",
    "Campaign",
    "Product",
    "ProductVariant",
    "ProductColorImage",
    "CartLine",
    "Order",
    "OrderLine",
    "Feedback",
]
