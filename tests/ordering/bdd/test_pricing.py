"""BDD tests for checkout pricing."""

import pytest
from ordering.pricing.engine import price
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/pricing.feature")


@pytest.fixture()
def breakdown():
    return {"value": None}


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse(
        'the cart is priced with coupon "{coupon}" and {points:d} points from a balance of {balance:d}'
    )
)
def price_cart(cart, coupon, points, balance, breakdown, error):
    try:
        breakdown["value"] = price(
            cart.snapshot().lines,
            coupon_code=None if coupon == "NONE" else coupon,
            requested_points=points,
            loyalty_balance=balance,
        )
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the subtotal is {amount:g}"))
def subtotal_is(breakdown, amount):
    assert breakdown["value"].subtotal == amount


@then(parsers.cfparse("the shipping fee is {amount:g}"))
def shipping_is(breakdown, amount):
    assert breakdown["value"].shipping_fee == amount


@then(parsers.cfparse("the tax is {amount:g}"))
def tax_is(breakdown, amount):
    assert breakdown["value"].tax == amount


@then(parsers.cfparse("the coupon discount is {amount:g}"))
def discount_is(breakdown, amount):
    assert breakdown["value"].coupon_discount == amount


@then(parsers.cfparse("the shopper pays {amount:g}"))
def shopper_pays(breakdown, amount):
    assert breakdown["value"].effective_total == amount
