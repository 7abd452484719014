"""Ordering API package."""

from ordering.api.routes import cart_router, customer_router, order_router

__all__ = ["cart_router", "customer_router", "order_router"]
