"""Read-side lookups over persisted orders.

Writes go through ``current_domain.repository_for(Order).add`` inside the
command handlers; these helpers cover the secondary keys.
"""

import re

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import Order

INTERNAL_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def is_internal_id(key) -> bool:
    return bool(key) and bool(INTERNAL_ID_PATTERN.match(str(key)))


def _first(**filters):
    results = current_domain.repository_for(Order)._dao.query.filter(**filters).all().items
    return results[0] if results else None


def find_by_correlation_key(correlation_key) -> Order | None:
    return _first(correlation_key=correlation_key)


def get_by_order_number(order_number) -> Order:
    order = _first(order_number=order_number)
    if order is None:
        raise ObjectNotFoundError(f"Order `{order_number}` does not exist")
    return order


def lookup(key) -> Order:
    """Resolve a 24-hex key as an internal id and anything else as an order number.

    Raises ObjectNotFoundError when neither matches.
    """
    if is_internal_id(key):
        return current_domain.repository_for(Order).get(str(key).lower())
    return get_by_order_number(key)


def list_for_customer(customer_id, status=None) -> list[Order]:
    """A customer's orders, newest first, optionally narrowed to one status."""
    filters = {"customer_id": str(customer_id)}
    if status:
        filters["status"] = status
    orders = current_domain.repository_for(Order)._dao.query.filter(**filters).all().items
    return sorted(orders, key=lambda order: order.created_at, reverse=True)
