"""Static coupon registry.

Coupons are looked up case-insensitively. A discount rate applies to the
cart subtotal only; shipping and tax are unaffected.
"""

from dataclasses import dataclass

from ordering.exceptions import InvalidCoupon


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_rate: float
    description: str


COUPONS = {
    "WELCOME10": Coupon("WELCOME10", 0.10, "10% off your first order"),
    "SAVE20": Coupon("SAVE20", 0.20, "20% off orders over ₹1000"),
    "FREESHIP": Coupon("FREESHIP", 0.0, "Free shipping on any order"),
}


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def lookup_coupon(code: str) -> Coupon:
    """Return the registered coupon for code. Raises InvalidCoupon if unknown."""
    coupon = COUPONS.get(normalize_code(code))
    if coupon is None:
        raise InvalidCoupon({"coupon_code": ["Invalid coupon code"]})
    return coupon
