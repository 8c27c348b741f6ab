"""Cart line management: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.persistence import save_cart
from ordering.domain import ordering


@ordering.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(default=1)
    vendor_label = String(max_length=255)
    category = String(max_length=100)
    stock_hint = Integer()
    image = String(max_length=500)


@ordering.command(part_of="Cart")
class SetCartQuantity:
    """Set a line's quantity; zero or less removes the line."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartLinesHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.add_item(
            product_id=command.product_id,
            name=command.name,
            unit_price=command.unit_price,
            quantity=command.quantity if command.quantity is not None else 1,
            vendor_label=command.vendor_label,
            category=command.category,
            stock_hint=command.stock_hint,
            image=command.image,
        )
        repo.add(cart)
        save_cart(cart)

    @handle(SetCartQuantity)
    def set_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.set_quantity(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)
        save_cart(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)
        save_cart(cart)
