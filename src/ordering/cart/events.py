"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartLineAdded:
    """A product was added to the cart, or its quantity was increased."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True)
    unit_price = Float(required=True)
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartLineQuantitySet:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartLineRemoved:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.event(part_of="Cart")
class CartCleared:
    """All lines were removed, explicitly or after a successful checkout."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    reason = String(required=True, max_length=50)
    cleared_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartRestored:
    """Cart contents were reloaded from durable storage."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    restored_lines = Integer(required=True)
    dropped_lines = Integer(required=True)
