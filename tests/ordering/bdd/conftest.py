"""Shared BDD fixtures and step definitions for the ordering domain."""

import pytest
from ordering.cart.cart import Cart
from ordering.checkout.request import CustomerIdentity
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then

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


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception a When step captured."""
    return {"exc": None}


@pytest.fixture()
def shipping():
    return dict(SHIPPING)


@pytest.fixture()
def customer():
    return CustomerIdentity(id="cust-001", name="Asha Rao", email="asha@example.com")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    return Cart.create(session_id="sess-bdd")


@given(
    parsers.cfparse('the cart holds {quantity:d} of "{product_id}" at {unit_price:g}'),
    target_fixture="cart",
)
def cart_holding(cart, quantity, product_id, unit_price):
    cart.add_item(product_id=product_id, name=f"Product {product_id}", unit_price=unit_price, quantity=quantity)
    return cart


@given(parsers.cfparse("the cart holds {count:d} different products"), target_fixture="cart")
def cart_with_distinct_products(cart, count):
    for index in range(count):
        cart.add_item(product_id=f"prod-{index:03}", name=f"Product {index}", unit_price=10.0)
    return cart


@given("the cart is saved", target_fixture="cart_id")
def saved_cart(cart):
    current_domain.repository_for(Cart).add(cart)
    return str(cart.id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the request is rejected with {error_name}"))
def request_rejected(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then("the request succeeds")
def request_succeeds(error):
    assert error["exc"] is None


@then(parsers.cfparse('the order is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status
