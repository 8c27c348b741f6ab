"""Pydantic request/response schemas for the checkout API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingSchema(BaseModel):
    # Format checks happen in the domain so errors come back field-keyed
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "India"


class CartLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    vendor_label: str | None = None
    category: str | None = None
    stock_hint: int | None = None
    image: str | None = None
    line_total: float


class PricingSchema(BaseModel):
    subtotal: float
    shipping_fee: float
    tax: float
    coupon_code: str | None = None
    coupon_discount: float = 0.0
    points_applied: int = 0
    total: float
    effective_total: float


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    session_id: str
    customer_id: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"session_id": "sess-42", "customer_id": None}]}}


class AddToCartRequest(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    quantity: int = 1
    vendor_label: str | None = None
    category: str | None = None
    stock_hint: int | None = None
    image: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "p-100",
                    "name": "Enamel Pin Set",
                    "unit_price": 500.0,
                    "quantity": 2,
                    "category": "accessories",
                }
            ]
        }
    }


class SetQuantityRequest(BaseModel):
    quantity: int


class CartIdResponse(BaseModel):
    cart_id: str


class CartResponse(BaseModel):
    cart_id: str
    session_id: str
    customer_id: str | None = None
    lines: list[CartLineSchema]
    item_count: int
    distinct_lines: int
    is_full: bool
    subtotal: float


class RestoreCartResponse(BaseModel):
    cart_id: str
    restored_lines: int


class CouponResponse(BaseModel):
    code: str
    discount_rate: float
    description: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class DirectItemSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    quantity: int = 1
    vendor_label: str | None = None
    category: str | None = None
    image: str | None = None


class CheckoutSubmission(BaseModel):
    """Either ``cart_id`` (cart checkout) or ``item`` (buy now) must be given."""

    cart_id: str | None = None
    item: DirectItemSchema | None = None
    shipping: ShippingSchema
    payment_method: str = "card"
    coupon_code: str | None = None
    loyalty_points: int = Field(default=0, ge=0)
    correlation_key: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_id": "0b6f3c1e-...",
                    "shipping": {
                        "first_name": "Asha",
                        "last_name": "Rao",
                        "email": "asha@example.com",
                        "phone": "+91 98765 43210",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "zip_code": "560001",
                        "country": "India",
                    },
                    "payment_method": "upi",
                    "coupon_code": "WELCOME10",
                    "loyalty_points": 0,
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    correlation_key: str
    status: str
    order_id: str | None = None
    order_number: str | None = None
    payment_intent_id: str | None = None
    amount: float
    pricing: PricingSchema
    points_redeemed: int = 0
    points_earned: int = 0
    confirmation_path: str | None = None


class ConfigureGatewayRequest(BaseModel):
    intent_should_succeed: bool = True
    confirm_should_succeed: bool = True
    failure_reason: str = "Card declined"
    drop_connection_on: str | None = None


class GatewayConfigResponse(BaseModel):
    gateway: str
    intent_should_succeed: bool
    confirm_should_succeed: bool
    failure_reason: str
    drop_connection_on: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    vendor_label: str | None = None
    category: str | None = None
    image: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    checkout_mode: str
    payment_method: str
    payment_status: str | None = None
    payment_intent_id: str | None = None
    items: list[OrderItemSchema]
    shipping: ShippingSchema
    pricing: PricingSchema
    carrier: str | None = None
    tracking_number: str | None = None
    estimated_delivery: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class TimelineEntrySchema(BaseModel):
    event_type: str
    status: str
    description: str
    occurred_at: datetime


class TrackingStepSchema(BaseModel):
    status: str
    label: str
    completed: bool
    current: bool
    reached_at: datetime | None = None


class TrackingResponse(BaseModel):
    order_number: str
    status: str
    carrier: str | None = None
    tracking_number: str | None = None
    estimated_delivery: str | None = None
    timeline: list[TimelineEntrySchema]
    steps: list[TrackingStepSchema]


class AdvanceStatusRequest(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    reason: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str = "Changed my mind"


class StatusResponse(BaseModel):
    status: str = "ok"
