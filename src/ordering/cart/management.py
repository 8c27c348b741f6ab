"""Cart management: creation, clearing and restoring from durable storage."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.persistence import load_lines, save_cart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class CreateCart:
    """Open an empty cart for a browsing session."""

    session_id = String(required=True, max_length=255)
    customer_id = Identifier()


@ordering.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)
    reason = String(max_length=50, default="customer")


@ordering.command(part_of="Cart")
class RestoreCart:
    """Reload a cart's lines from the session's persisted copy."""

    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(session_id=command.session_id, customer_id=command.customer_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear(reason=command.reason or "customer")
        repo.add(cart)
        save_cart(cart)

    @handle(RestoreCart)
    def restore_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        lines, dropped = load_lines(cart.session_id)
        cart.replace_lines(lines, dropped=dropped)
        repo.add(cart)
        save_cart(cart)
        logger.info(
            "Cart restored from storage",
            cart_id=str(cart.id),
            restored=len(cart.lines),
            dropped=dropped,
        )
        return len(cart.lines)
