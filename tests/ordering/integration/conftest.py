import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import (
    cart_router,
    checkout_router,
    coupon_router,
    customer_router,
    order_router,
    register_exception_handlers,
)


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(coupon_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(customer_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer_headers():
    return {
        "X-Customer-Id": "cust-api-001",
        "X-Customer-Name": "Asha Rao",
        "X-Customer-Email": "asha@example.com",
        "X-Loyalty-Balance": "0",
    }
