"""Mirror carts to durable storage and recover them again.

Writes never fail a cart mutation: when storage refuses a write the stale
copy is dropped instead, so a later restore cannot resurrect outdated lines.
Reads are self-healing: lines that fail the integrity checks are discarded
and unreadable payloads yield an empty cart.
"""

import json
import math
import numbers

import structlog

from ordering.cart.cart import CART_CAPACITY
from ordering.cart.snapshot import LineSnapshot
from ordering.cart.storage import get_storage
from ordering.cart.storage.port import StorageError

logger = structlog.get_logger(__name__)


def storage_key(session_id) -> str:
    return f"cart:{session_id}"


# Mirrors the CartLine field lengths
TEXT_LIMITS = {"product_id": 255, "name": 255, "vendor_label": 255, "category": 100, "image": 500}


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _fits(entry, field) -> bool:
    value = entry.get(field)
    if value is None:
        return True
    if field == "product_id" and isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    return isinstance(value, str) and len(value) <= TEXT_LIMITS[field]


def is_valid_entry(entry) -> bool:
    """Integrity check for a persisted line."""
    if not isinstance(entry, dict):
        return False
    if not entry.get("product_id") or not entry.get("name"):
        return False
    if not all(_fits(entry, field) for field in TEXT_LIMITS):
        return False
    price = entry.get("unit_price")
    quantity = entry.get("quantity")
    if not _is_number(price) or price < 0:
        return False
    if not _is_number(quantity) or int(quantity) != quantity:
        return False
    return 0 < quantity <= CART_CAPACITY


def save_cart(cart) -> bool:
    """Write the cart's lines to durable storage. Returns False if the copy had to be dropped."""
    storage = get_storage()
    key = storage_key(cart.session_id)
    payload = json.dumps([line.to_snapshot().to_dict() for line in cart.ordered_lines()])
    try:
        storage.write(key, payload)
    except StorageError as exc:
        logger.warning(
            "Cart storage write failed, dropping persisted copy",
            cart_id=str(cart.id),
            key=key,
            error=str(exc),
        )
        storage.delete(key)
        return False
    return True


def load_lines(session_id) -> tuple[list[LineSnapshot], int]:
    """Read persisted lines for a session.

    Returns the valid lines and the number of entries that were dropped.
    """
    storage = get_storage()
    key = storage_key(session_id)
    raw = storage.read(key)
    if raw is None:
        return [], 0

    try:
        entries = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Persisted cart is unreadable, clearing it", key=key)
        storage.delete(key)
        return [], 0

    if not isinstance(entries, list):
        logger.warning("Persisted cart has unexpected shape, clearing it", key=key)
        storage.delete(key)
        return [], 0

    lines = []
    seen = set()
    for entry in entries:
        if not is_valid_entry(entry) or str(entry["product_id"]) in seen:
            continue
        seen.add(str(entry["product_id"]))
        lines.append(
            LineSnapshot(
                product_id=str(entry["product_id"]),
                name=str(entry["name"]),
                unit_price=float(entry["unit_price"]),
                quantity=int(entry["quantity"]),
                vendor_label=entry.get("vendor_label"),
                category=entry.get("category"),
                stock_hint=int(entry["stock_hint"]) if _is_number(entry.get("stock_hint")) else None,
                image=entry.get("image"),
            )
        )

    dropped = len(entries) - len(lines)
    if dropped:
        logger.info("Dropped invalid cart entries on load", key=key, dropped=dropped)
    return lines, dropped
