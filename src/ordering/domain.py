"""Ordering bounded context: Cart, Pricing, Orders and Checkout.

Handles the shopping cart (CQRS), the pricing engine, the order lifecycle
and the checkout saga that converts a cart (or a direct purchase) into a
confirmed, paid order.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
