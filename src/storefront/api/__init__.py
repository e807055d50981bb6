"""Storefront domain API package."""

from storefront.api.routes import account_router, cart_router, order_router, payment_router, product_router

__all__ = ["account_router", "product_router", "cart_router", "order_router", "payment_router"]
