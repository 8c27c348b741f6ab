"""Faker-based payloads for the checkout load tests.

Shipping data satisfies the checkout validation rules (email, phone and
ZIP formats); prices straddle the free-shipping threshold.
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

PAYMENT_METHODS = ["card", "upi", "cod", "wallet"]
COUPON_CODES = [None, None, "WELCOME10", "SAVE20", "FREESHIP"]
CATEGORIES = ["stickers", "posters", "accessories", "stationery", "apparel"]


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:10]}"


def session_id() -> str:
    return f"sess-lt-{uuid.uuid4().hex[:12]}"


def cart_data(session: str, customer: str | None = None) -> dict:
    return {"session_id": session, "customer_id": customer}


def cart_item_data() -> dict:
    """An AddToCartRequest payload for a random product."""
    return {
        "product_id": f"prod-{uuid.uuid4().hex[:8]}",
        "name": fake.catch_phrase()[:255],
        "unit_price": float(random.choice([49, 99, 199, 349, 500, 799, 1299])),
        "quantity": random.randint(1, 3),
        "category": random.choice(CATEGORIES),
        "stock_hint": random.randint(1, 50),
    }


def shipping_data() -> dict:
    return {
        "first_name": fake.first_name()[:100],
        "last_name": fake.last_name()[:100],
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@example.com",
        "phone": f"+91 {random.randint(70000, 99999)} {random.randint(10000, 99999)}",
        "address": fake.street_address()[:500],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "zip_code": f"{random.randint(110000, 855999)}",
        "country": "India",
    }


def checkout_data(cart_id: str | None = None, item: dict | None = None, points: int = 0) -> dict:
    payload = {
        "shipping": shipping_data(),
        "payment_method": random.choice(PAYMENT_METHODS),
        "coupon_code": random.choice(COUPON_CODES),
        "loyalty_points": points,
        "correlation_key": uuid.uuid4().hex,
    }
    if cart_id:
        payload["cart_id"] = cart_id
    if item:
        payload["item"] = item
    return payload


def direct_item_data() -> dict:
    item = cart_item_data()
    item.pop("stock_hint")
    return item
