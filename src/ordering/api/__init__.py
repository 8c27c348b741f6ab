"""Checkout API package."""

from ordering.api.errors import register_exception_handlers
from ordering.api.routes import cart_router, checkout_router, coupon_router, customer_router, order_router

__all__ = [
    "cart_router",
    "checkout_router",
    "coupon_router",
    "customer_router",
    "order_router",
    "register_exception_handlers",
]
