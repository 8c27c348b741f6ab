"""Domain errors raised by the ordering context.

All errors derive from Protean's exception types and carry a field-keyed
``messages`` dict, so the API layer can translate them uniformly.
"""

from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ProteanExceptionWithMessage,
    ValidationError,
)


class CapacityExceeded(ValidationError):
    """A cart line would exceed the per-product quantity cap."""


class CartFull(ValidationError):
    """The cart already holds the maximum number of distinct lines."""


class InvalidCoupon(ValidationError):
    """The coupon code is not in the coupon registry."""


class InvalidTransition(ValidationError):
    """An order status change not allowed by the order state machine."""


class LoyaltyBalanceChanged(ValidationError):
    """The loyalty balance moved between pricing and redemption."""


class PaymentError(ProteanExceptionWithMessage, InvalidOperationError):
    """The payment gateway rejected or could not complete a payment step.

    Still an ``InvalidOperationError``, but with the same ``messages`` dict
    as the validation errors above.
    """


# Lookup misses are a normal outcome (mistyped tracking code, stale link).
NotFound = ObjectNotFoundError
