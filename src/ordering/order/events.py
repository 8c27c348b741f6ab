"""Domain events for the Order aggregate.

Every status change raises its own event. The timeline projection turns
them into the customer-facing tracking history.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A pending order was created by checkout."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    correlation_key = String(required=True)
    customer_id = Identifier(required=True)
    checkout_mode = String(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    item_count = Integer(required=True)
    payment_method = String(required=True)
    subtotal = Float(required=True)
    shipping_fee = Float(required=True)
    tax = Float(required=True)
    coupon_code = String()
    coupon_discount = Float()
    points_applied = Integer()
    total = Float(required=True)
    effective_total = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentRequested:
    """A payment intent was opened with the gateway for this order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_intent_id = String(required=True)
    payment_method = String(required=True)
    amount = Float(required=True)
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentFailed:
    """The gateway refused to confirm payment. The order stays pending."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_intent_id = String()
    reason = String(required=True)
    failed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderConfirmed:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    payment_intent_id = String()
    payment_method = String(required=True)
    payment_status = String(required=True)
    amount = Float(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderProcessing:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    started_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    carrier = String(required=True)
    tracking_number = String(required=True)
    estimated_delivery = String()  # ISO date
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderOutForDelivery:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    dispatched_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before fulfilment started."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)
