"""Shipping and payment-method checks run before checkout touches anything."""

import re

from protean.exceptions import ValidationError

from ordering.order.order import PaymentMethod

SHIPPING_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
    "country",
)

_FORMATS = {
    "email": (re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"), "Invalid email address"),
    "phone": (re.compile(r"^\+?[0-9\s-]{7,15}$"), "Invalid phone number"),
    "zip_code": (re.compile(r"^[A-Za-z0-9\-\s]{4,10}$"), "Invalid ZIP code"),
}

_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip_code": "ZIP code",
    "country": "Country",
}


def shipping_errors(shipping) -> dict[str, list[str]]:
    """Field-keyed problems with a shipping form. Empty when the form is valid."""
    shipping = shipping or {}
    errors: dict[str, list[str]] = {}
    for field in SHIPPING_FIELDS:
        value = shipping.get(field)
        text = str(value).strip() if value is not None else ""
        if not text:
            errors[field] = [f"{_LABELS[field]} is required"]
            continue
        if field in _FORMATS:
            pattern, message = _FORMATS[field]
            if not pattern.match(text):
                errors[field] = [message]
    return errors


def clean_shipping(shipping) -> dict[str, str]:
    """Validate and return the shipping form with surrounding whitespace removed."""
    errors = shipping_errors(shipping)
    if errors:
        raise ValidationError(errors)
    return {field: str(shipping[field]).strip() for field in SHIPPING_FIELDS}


def clean_payment_method(payment_method) -> str:
    method = (payment_method or "").strip().lower()
    if method not in {choice.value for choice in PaymentMethod}:
        raise ValidationError(
            {"payment_method": [f"Payment method must be one of: {', '.join(m.value for m in PaymentMethod)}"]}
        )
    return method
