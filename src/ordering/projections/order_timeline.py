"""Order timeline: append-only history of what happened to each order.

Feeds the tracking page. Entries carry the status the order was in after
the event, so the reader can show when each stage was reached.
"""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderOutForDelivery,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
    PaymentFailed,
    PaymentRequested,
)
from ordering.order.order import Order


@ordering.projection
class OrderTimeline:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    event_type = String(required=True, max_length=50)
    status = String(required=True, max_length=20)
    description = String(required=True, max_length=500)
    occurred_at = DateTime(required=True)


def _add_entry(event, event_type, status, description, occurred_at):
    current_domain.repository_for(OrderTimeline).add(
        OrderTimeline(
            entry_id=str(uuid.uuid4()),
            order_id=event.order_id,
            order_number=event.order_number,
            event_type=event_type,
            status=status,
            description=description,
            occurred_at=occurred_at,
        )
    )


@ordering.projector(projector_for=OrderTimeline, aggregates=[Order])
class OrderTimelineProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        _add_entry(event, "OrderPlaced", "pending", "Order placed", event.placed_at)

    @on(PaymentRequested)
    def on_payment_requested(self, event):
        _add_entry(
            event,
            "PaymentRequested",
            "pending",
            f"Payment of ₹{event.amount:.2f} requested via {event.payment_method}",
            event.requested_at,
        )

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        _add_entry(event, "PaymentFailed", "pending", f"Payment failed: {event.reason}", event.failed_at)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        _add_entry(event, "OrderConfirmed", "confirmed", "Order confirmed", event.confirmed_at)

    @on(OrderProcessing)
    def on_order_processing(self, event):
        _add_entry(event, "OrderProcessing", "processing", "Order is being packed", event.started_at)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        _add_entry(
            event,
            "OrderShipped",
            "shipped",
            f"Shipped via {event.carrier} (tracking: {event.tracking_number})",
            event.shipped_at,
        )

    @on(OrderOutForDelivery)
    def on_order_out_for_delivery(self, event):
        _add_entry(event, "OrderOutForDelivery", "out_for_delivery", "Out for delivery", event.dispatched_at)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        _add_entry(event, "OrderDelivered", "delivered", "Delivered", event.delivered_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        _add_entry(
            event,
            "OrderCancelled",
            "cancelled",
            f"Cancelled by {event.cancelled_by}: {event.reason}",
            event.cancelled_at,
        )
