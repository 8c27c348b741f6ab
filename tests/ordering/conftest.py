import pytest
from ordering.cart.items import AddToCart
from ordering.cart.management import CreateCart
from ordering.checkout.request import CustomerIdentity
from protean import current_domain

SHIPPING = {
    "first_name": "Asha",
    "last_name": "Rao",
    "email": "asha@example.com",
    "phone": "+91 98765 43210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "zip_code": "560001",
    "country": "India",
}


@pytest.fixture
def shipping():
    return dict(SHIPPING)


@pytest.fixture
def customer():
    return CustomerIdentity(id="cust-001", name="Asha Rao", email="asha@example.com", loyalty_balance=0)


@pytest.fixture
def make_cart():
    """Create a cart and fill it with (product_id, name, unit_price, quantity) tuples."""

    def _make(*lines, session_id="sess-001", customer_id="cust-001"):
        cart_id = current_domain.process(
            CreateCart(session_id=session_id, customer_id=customer_id),
            asynchronous=False,
        )
        for product_id, name, unit_price, quantity in lines:
            current_domain.process(
                AddToCart(
                    cart_id=cart_id,
                    product_id=product_id,
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                ),
                asynchronous=False,
            )
        return cart_id

    return _make
