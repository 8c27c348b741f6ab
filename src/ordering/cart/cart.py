"""Cart aggregate (CQRS): the session cart that feeds checkout.

The cart holds at most CART_CAPACITY distinct lines, and no line may hold
more than CART_CAPACITY units. Requests that would break either cap are
rejected with CapacityExceeded / CartFull and leave the cart unchanged;
quantities are never clamped.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.cart.events import (
    CartCleared,
    CartLineAdded,
    CartLineQuantitySet,
    CartLineRemoved,
    CartRestored,
)
from ordering.cart.snapshot import CartSnapshot, LineSnapshot
from ordering.domain import ordering
from ordering.exceptions import CapacityExceeded, CartFull

CART_CAPACITY = 15
DEFAULT_VENDOR_LABEL = "SnaflesHub"
DEFAULT_STOCK_HINT = 99


@ordering.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1, max_value=CART_CAPACITY)
    vendor_label = String(max_length=255, default=DEFAULT_VENDOR_LABEL)
    category = String(max_length=100)
    stock_hint = Integer(default=DEFAULT_STOCK_HINT)
    image = String(max_length=500)
    position = Integer(default=0)  # insertion order, for display

    def to_snapshot(self) -> LineSnapshot:
        return LineSnapshot(
            product_id=str(self.product_id),
            name=self.name,
            unit_price=self.unit_price,
            quantity=self.quantity,
            vendor_label=self.vendor_label,
            category=self.category,
            stock_hint=self.stock_hint,
            image=self.image,
        )


@ordering.aggregate
class Cart:
    session_id = String(required=True, max_length=255)
    customer_id = Identifier()
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def distinct_lines_within_capacity(self):
        if len(self.lines) > CART_CAPACITY:
            raise CartFull({"lines": [f"A cart holds at most {CART_CAPACITY} different items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def ordered_lines(self):
        return sorted(self.lines, key=lambda line: line.position or 0)

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    @property
    def item_count(self):
        return sum(line.quantity for line in self.lines)

    @property
    def is_full(self):
        return len(self.lines) >= CART_CAPACITY

    def can_add(self, product_id, quantity=1):
        """Whether add_item(product_id, quantity) would pass the capacity checks."""
        existing = self.line_for(product_id)
        if existing:
            return existing.quantity + quantity <= CART_CAPACITY
        return not self.is_full and quantity <= CART_CAPACITY

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            cart_id=str(self.id),
            lines=tuple(line.to_snapshot() for line in self.ordered_lines()),
            capacity=CART_CAPACITY,
        )

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _next_position(self):
        return max((line.position or 0 for line in self.lines), default=0) + 1

    def add_item(
        self,
        product_id,
        name,
        unit_price,
        quantity=1,
        vendor_label=None,
        category=None,
        stock_hint=None,
        image=None,
    ):
        """Add a product, or increase its quantity if it is already in the cart."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        if existing:
            new_quantity = existing.quantity + quantity
            if new_quantity > CART_CAPACITY:
                raise CapacityExceeded(
                    {"quantity": [f"Cannot add more items. Cart limit is {CART_CAPACITY} items per product."]}
                )
            existing.quantity = new_quantity
            name = existing.name
            unit_price = existing.unit_price
        else:
            if self.is_full:
                raise CartFull({"cart": [f"Cart is full! Maximum {CART_CAPACITY} different items allowed."]})
            if quantity > CART_CAPACITY:
                raise CapacityExceeded(
                    {"quantity": [f"Cannot add more than {CART_CAPACITY} items of this product."]}
                )
            self.add_lines(
                CartLine(
                    product_id=product_id,
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                    vendor_label=vendor_label or DEFAULT_VENDOR_LABEL,
                    category=category,
                    stock_hint=stock_hint if stock_hint is not None else DEFAULT_STOCK_HINT,
                    image=image,
                    position=self._next_position(),
                )
            )
            new_quantity = quantity

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                name=name,
                unit_price=unit_price,
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product. Removing a product that is not in the cart is a no-op."""
        line = self.line_for(product_id)
        if line is None:
            return

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartLineRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def set_quantity(self, product_id, quantity):
        """Set a line's quantity directly. Zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id)
            return
        if quantity > CART_CAPACITY:
            raise CapacityExceeded({"quantity": [f"Cannot add more than {CART_CAPACITY} items of this product."]})

        line = self.line_for(product_id)
        if line is None:
            return

        previous_quantity = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartLineQuantitySet(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def clear(self, reason="customer"):
        """Remove every line."""
        for line in list(self.lines):
            self.remove_lines(line)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(CartCleared(cart_id=str(self.id), reason=reason, cleared_at=now))

    def replace_lines(self, snapshots, dropped=0):
        """Swap the cart contents for lines recovered from durable storage."""
        for line in list(self.lines):
            self.remove_lines(line)

        for position, snapshot in enumerate(snapshots[:CART_CAPACITY], start=1):
            self.add_lines(
                CartLine(
                    product_id=snapshot.product_id,
                    name=snapshot.name,
                    unit_price=snapshot.unit_price,
                    quantity=snapshot.quantity,
                    vendor_label=snapshot.vendor_label or DEFAULT_VENDOR_LABEL,
                    category=snapshot.category,
                    stock_hint=snapshot.stock_hint if snapshot.stock_hint is not None else DEFAULT_STOCK_HINT,
                    image=snapshot.image,
                    position=position,
                )
            )

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartRestored(
                cart_id=str(self.id),
                restored_lines=len(self.lines),
                dropped_lines=dropped + max(len(snapshots) - CART_CAPACITY, 0),
            )
        )
