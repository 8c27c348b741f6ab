"""Order tracking reader.

Customers look orders up by the number on their confirmation, or follow a
link carrying the internal id. A miss is an ordinary outcome (typo, stale
link) and is logged at info.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order import queries
from ordering.order.order import Order
from ordering.order.state_machine import FORWARD_SEQUENCE, OrderStatus, as_status
from ordering.projections.order_timeline import OrderTimeline

logger = structlog.get_logger(__name__)

# Stages shown on the progress bar; ``pending`` is not a customer-facing step
TRACKING_STEPS = tuple(status for status in FORWARD_SEQUENCE if status != OrderStatus.PENDING)

_STEP_LABELS = {
    OrderStatus.CONFIRMED: "Order Confirmed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
}


def timeline_for(order_id) -> list[dict]:
    entries = current_domain.repository_for(OrderTimeline)._dao.query.filter(order_id=str(order_id)).all().items
    return [
        {
            "event_type": entry.event_type,
            "status": entry.status,
            "description": entry.description,
            "occurred_at": entry.occurred_at,
        }
        for entry in sorted(entries, key=lambda entry: entry.occurred_at)
    ]


def progress_steps(status, timeline=()) -> list[dict]:
    """One entry per tracking step with ``completed`` and ``current`` flags.

    A cancelled order shows every step incomplete.
    """
    current = as_status(status)
    reached_at = {}
    for entry in timeline:
        reached_at.setdefault(entry["status"], entry["occurred_at"])

    reached_index = TRACKING_STEPS.index(current) if current in TRACKING_STEPS else -1
    return [
        {
            "status": step.value,
            "label": _STEP_LABELS[step],
            "completed": index <= reached_index,
            "current": index == reached_index,
            "reached_at": reached_at.get(step.value),
        }
        for index, step in enumerate(TRACKING_STEPS)
    ]


def get_by_id(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        logger.info("Order lookup missed", key=order_id)
        raise


def lookup(key) -> Order:
    """Resolve a 24-hex key as an id, anything else as an order number."""
    try:
        return queries.lookup(key)
    except ObjectNotFoundError:
        logger.info("Order lookup missed", key=key)
        raise


def track_by_order_number(order_number) -> dict:
    try:
        order = queries.get_by_order_number(order_number)
    except ObjectNotFoundError:
        logger.info("Order lookup missed", key=order_number)
        raise

    timeline = timeline_for(order.id)
    return {
        "order_number": order.order_number,
        "status": order.status,
        "carrier": order.carrier,
        "tracking_number": order.tracking_number,
        "estimated_delivery": order.estimated_delivery,
        "timeline": timeline,
        "steps": progress_steps(order.status, timeline),
    }


def list_for_customer(customer_id, status=None) -> list[Order]:
    return queries.list_for_customer(customer_id, status=status)
