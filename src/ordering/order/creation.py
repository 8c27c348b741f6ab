"""Order placement: command and handler.

Placement is idempotent on the checkout correlation key: re-submitting the
same key returns the order created the first time.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.queries import find_by_correlation_key

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    correlation_key = String(required=True, max_length=255)
    customer_id = Identifier(required=True)
    checkout_mode = String(required=True, max_length=10)
    cart_id = Identifier()
    items = Text(required=True)  # JSON: list of item dicts
    shipping = Text(required=True)  # JSON: ShippingInfo fields
    pricing = Text(required=True)  # JSON: OrderPricing fields
    payment_method = String(required=True, max_length=20)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        """Returns ``{"order_id", "order_number", "created"}``."""
        existing = find_by_correlation_key(command.correlation_key)
        if existing is not None:
            logger.info(
                "Order already placed for checkout",
                correlation_key=command.correlation_key,
                order_id=existing.id,
            )
            return {"order_id": existing.id, "order_number": existing.order_number, "created": False}

        order = Order.place(
            correlation_key=command.correlation_key,
            customer_id=command.customer_id,
            items_data=_loads(command.items),
            shipping=_loads(command.shipping),
            pricing=_loads(command.pricing),
            payment_method=command.payment_method,
            checkout_mode=command.checkout_mode,
            cart_id=command.cart_id,
        )
        current_domain.repository_for(Order).add(order)
        return {"order_id": order.id, "order_number": order.order_number, "created": True}
