"""API v1 routers."""

from storefront.api.v1 import auth, brands, campaigns, cart, feedback, orders, products, users

__all__ = ["auth", "brands", "campaigns", "cart", "feedback", "orders", "products", "users"]
