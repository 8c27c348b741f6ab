"""Checkout entry points and the request they normalize to.

A checkout starts either from a cart (``CartCheckout``) or from a single
product bought directly (``DirectCheckout``). Both become one
``CheckoutRequest`` holding the lines to price and order.
"""

from dataclasses import dataclass, field

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import CART_CAPACITY, DEFAULT_VENDOR_LABEL, Cart
from ordering.cart.snapshot import LineSnapshot
from ordering.order.order import CheckoutMode


@dataclass(frozen=True)
class CustomerIdentity:
    """The signed-in customer, as supplied by the identity context."""

    id: str
    name: str | None = None
    email: str | None = None
    loyalty_balance: int = 0


@dataclass(frozen=True)
class CartCheckout:
    cart_id: str


@dataclass(frozen=True)
class DirectCheckout:
    product_id: str
    name: str
    unit_price: float
    quantity: int = 1
    vendor_label: str | None = None
    category: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class CheckoutRequest:
    mode: str
    items: tuple[LineSnapshot, ...] = field(default_factory=tuple)
    cart_id: str | None = None

    def items_payload(self) -> list[dict]:
        """Lines in the shape OrderItem accepts."""
        return [
            {
                "product_id": line.product_id,
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "vendor_label": line.vendor_label,
                "category": line.category,
                "image": line.image,
            }
            for line in self.items
        ]


def _from_cart(entry: CartCheckout) -> CheckoutRequest:
    cart = current_domain.repository_for(Cart).get(entry.cart_id)
    snapshot = cart.snapshot()
    if snapshot.is_empty:
        raise ValidationError({"cart": ["Your cart is empty"]})
    return CheckoutRequest(mode=CheckoutMode.CART.value, items=snapshot.lines, cart_id=snapshot.cart_id)


def _direct(entry: DirectCheckout) -> CheckoutRequest:
    errors = {}
    if not entry.product_id or not entry.name:
        errors["product"] = ["A product is required"]
    if entry.unit_price is None or entry.unit_price < 0:
        errors["unit_price"] = ["Price must not be negative"]
    if entry.quantity < 1 or entry.quantity > CART_CAPACITY:
        errors["quantity"] = [f"Quantity must be between 1 and {CART_CAPACITY}"]
    if errors:
        raise ValidationError(errors)

    line = LineSnapshot(
        product_id=str(entry.product_id),
        name=entry.name,
        unit_price=float(entry.unit_price),
        quantity=entry.quantity,
        vendor_label=entry.vendor_label or DEFAULT_VENDOR_LABEL,
        category=entry.category,
        image=entry.image,
    )
    return CheckoutRequest(mode=CheckoutMode.DIRECT.value, items=(line,))


def normalize(entry) -> CheckoutRequest:
    if isinstance(entry, CartCheckout):
        return _from_cart(entry)
    if isinstance(entry, DirectCheckout):
        return _direct(entry)
    raise TypeError(f"Unsupported checkout entry: {type(entry).__name__}")
