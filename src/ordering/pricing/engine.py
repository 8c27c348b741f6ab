"""Pricing engine: derives an order's totals from its lines.

``price()`` is a pure function: no I/O, no clock, no randomness. The same
inputs always produce the same PricingBreakdown, so the checkout saga can
price a cart snapshot once and persist the result with the order.

    subtotal        = sum(unit_price * quantity)
    shipping_fee    = 0 if subtotal > 999 else 99
    tax             = round(subtotal * 0.18)
    coupon_discount = round(subtotal * coupon.discount_rate)
    total           = max(0, subtotal + shipping_fee + tax - coupon_discount)
    points_applied  = min(max(0, requested_points), loyalty_balance, total)
    effective_total = max(0, total - points_applied)

Rounding is half-up, matching how amounts are shown to shoppers.
"""

import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from ordering.pricing.coupons import lookup_coupon

FREE_SHIPPING_THRESHOLD = 999
FLAT_SHIPPING_FEE = 99
TAX_RATE = Decimal("0.18")


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: float
    shipping_fee: float
    tax: float
    coupon_discount: float
    points_applied: int
    total: float
    effective_total: float
    coupon_code: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_subtotal(lines: Iterable) -> float:
    return float(sum(Decimal(str(line.unit_price)) * line.quantity for line in lines))


def shipping_fee_for(subtotal: float) -> float:
    return 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else float(FLAT_SHIPPING_FEE)


def tax_for(subtotal: float) -> float:
    return float(round_half_up(Decimal(str(subtotal)) * TAX_RATE))


def price(lines, coupon_code=None, requested_points=0, loyalty_balance=0) -> PricingBreakdown:
    """Price a set of lines (anything with ``unit_price`` and ``quantity``).

    Raises InvalidCoupon when coupon_code is given but not registered.
    """
    subtotal = compute_subtotal(lines)
    shipping_fee = shipping_fee_for(subtotal)
    tax = tax_for(subtotal)

    coupon = lookup_coupon(coupon_code) if coupon_code else None
    coupon_discount = float(round_half_up(Decimal(str(subtotal)) * Decimal(str(coupon.discount_rate)))) if coupon else 0.0

    total = max(0.0, subtotal + shipping_fee + tax - coupon_discount)
    points_applied = int(min(max(0, requested_points or 0), max(0, loyalty_balance or 0), math.floor(total)))
    effective_total = max(0.0, total - points_applied)

    return PricingBreakdown(
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        tax=tax,
        coupon_discount=coupon_discount,
        points_applied=points_applied,
        total=total,
        effective_total=effective_total,
        coupon_code=coupon.code if coupon else None,
    )
