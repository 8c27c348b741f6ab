"""Immutable cart views handed to pricing and checkout.

Snapshots decouple the checkout pipeline from the live Cart aggregate: the
saga prices and orders exactly what was in the cart when checkout began.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LineSnapshot:
    product_id: str
    name: str
    unit_price: float
    quantity: int
    vendor_label: str | None = None
    category: str | None = None
    stock_hint: int | None = None
    image: str | None = None

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "vendor_label": self.vendor_label,
            "category": self.category,
            "stock_hint": self.stock_hint,
            "image": self.image,
        }


@dataclass(frozen=True)
class CartSnapshot:
    cart_id: str
    lines: tuple[LineSnapshot, ...] = field(default_factory=tuple)
    capacity: int = 15

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_full(self) -> bool:
        return len(self.lines) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self.lines)

    def line_for(self, product_id: str) -> LineSnapshot | None:
        return next((line for line in self.lines if line.product_id == str(product_id)), None)
