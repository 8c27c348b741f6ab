"""FastAPI routes for checkout: carts, coupons, checkout and order tracking."""

import os

from fastapi import APIRouter, Depends, Header, HTTPException
from payments.gateway import configure_fake_gateway
from protean.utils.globals import current_domain

from ordering import tracking
from ordering.api.schemas import (
    AddToCartRequest,
    AdvanceStatusRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartLineSchema,
    CartResponse,
    CheckoutResponse,
    CheckoutSubmission,
    ConfigureGatewayRequest,
    CouponResponse,
    CreateCartRequest,
    GatewayConfigResponse,
    OrderItemSchema,
    OrderResponse,
    PricingSchema,
    RestoreCartResponse,
    SetQuantityRequest,
    ShippingSchema,
    StatusResponse,
    TrackingResponse,
)
from ordering.cart.cart import Cart
from ordering.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from ordering.cart.management import ClearCart, CreateCart, RestoreCart
from ordering.checkout.request import CartCheckout, CustomerIdentity, DirectCheckout
from ordering.checkout.saga import CheckoutOrchestrator, CheckoutResult
from ordering.order.cancellation import CancelOrder
from ordering.order.fulfillment import AdvanceOrderStatus
from ordering.pricing.coupons import lookup_coupon


def require_customer(
    x_customer_id: str | None = Header(default=None),
    x_customer_name: str | None = Header(default=None),
    x_customer_email: str | None = Header(default=None),
    x_loyalty_balance: int = Header(default=0),
) -> CustomerIdentity:
    """The signed-in customer, forwarded by the identity gateway as headers."""
    if not x_customer_id:
        raise HTTPException(status_code=401, detail="Sign in to continue")
    return CustomerIdentity(
        id=x_customer_id,
        name=x_customer_name,
        email=x_customer_email,
        loyalty_balance=max(x_loyalty_balance, 0),
    )


def _cart_response(cart_id) -> CartResponse:
    cart = current_domain.repository_for(Cart).get(cart_id)
    snapshot = cart.snapshot()
    return CartResponse(
        cart_id=str(cart.id),
        session_id=cart.session_id,
        customer_id=str(cart.customer_id) if cart.customer_id else None,
        lines=[CartLineSchema(**line.to_dict(), line_total=line.line_total) for line in snapshot.lines],
        item_count=snapshot.item_count,
        distinct_lines=len(snapshot.lines),
        is_full=snapshot.is_full,
        subtotal=snapshot.subtotal,
    )


def _checkout_response(result: CheckoutResult) -> CheckoutResponse:
    return CheckoutResponse(
        correlation_key=result.correlation_key,
        status=result.status,
        order_id=result.order_id,
        order_number=result.order_number,
        payment_intent_id=result.payment_intent_id,
        amount=result.amount,
        pricing=PricingSchema(**result.pricing),
        points_redeemed=result.points_redeemed,
        points_earned=result.points_earned,
        confirmation_path=result.confirmation_path,
    )


def _order_response(order) -> OrderResponse:
    pricing = order.pricing
    return OrderResponse(
        order_id=order.id,
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        checkout_mode=order.checkout_mode,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        payment_intent_id=order.payment_intent_id,
        items=[
            OrderItemSchema(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                vendor_label=item.vendor_label,
                category=item.category,
                image=item.image,
            )
            for item in order.items
        ],
        shipping=ShippingSchema(**order.shipping.to_dict()),
        pricing=PricingSchema(
            subtotal=pricing.subtotal,
            shipping_fee=pricing.shipping_fee,
            tax=pricing.tax,
            coupon_code=pricing.coupon_code,
            coupon_discount=pricing.coupon_discount,
            points_applied=pricing.points_applied,
            total=pricing.total,
            effective_total=pricing.effective_total,
        ),
        carrier=order.carrier,
        tracking_number=order.tracking_number,
        estimated_delivery=order.estimated_delivery,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(session_id=body.session_id, customer_id=body.customer_id)
    cart_id = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=cart_id)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    return _cart_response(cart_id)


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        name=body.name,
        unit_price=body.unit_price,
        quantity=body.quantity,
        vendor_label=body.vendor_label,
        category=body.category,
        stock_hint=body.stock_hint,
        image=body.image,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def set_cart_item_quantity(cart_id: str, product_id: str, body: SetQuantityRequest) -> CartResponse:
    command = SetCartQuantity(cart_id=cart_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(cart_id: str, product_id: str) -> CartResponse:
    current_domain.process(RemoveFromCart(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/{cart_id}/items", response_model=CartResponse)
async def clear_cart(cart_id: str) -> CartResponse:
    current_domain.process(ClearCart(cart_id=cart_id, reason="customer"), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.post("/{cart_id}/restore", response_model=RestoreCartResponse)
async def restore_cart(cart_id: str) -> RestoreCartResponse:
    restored = current_domain.process(RestoreCart(cart_id=cart_id), asynchronous=False)
    return RestoreCartResponse(cart_id=cart_id, restored_lines=restored)


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("/{code}", response_model=CouponResponse)
async def preview_coupon(code: str) -> CouponResponse:
    coupon = lookup_coupon(code)
    return CouponResponse(code=coupon.code, discount_rate=coupon.discount_rate, description=coupon.description)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def submit_checkout(
    body: CheckoutSubmission,
    customer: CustomerIdentity = Depends(require_customer),
) -> CheckoutResponse:
    """Place an order from a cart or a single product.

    Re-sending the same ``correlation_key`` never creates a second order;
    it resumes the checkout that key started.
    """
    if body.cart_id and body.item:
        raise HTTPException(status_code=400, detail="Send either cart_id or item, not both")
    if body.cart_id:
        entry = CartCheckout(cart_id=body.cart_id)
    elif body.item:
        entry = DirectCheckout(**body.item.model_dump())
    else:
        raise HTTPException(status_code=400, detail="Nothing to check out")

    result = CheckoutOrchestrator().checkout(
        entry,
        customer=customer,
        shipping=body.shipping.model_dump(),
        payment_method=body.payment_method,
        coupon_code=body.coupon_code,
        requested_points=body.loyalty_points,
        correlation_key=body.correlation_key,
    )
    return _checkout_response(result)


@checkout_router.post("/{correlation_key}/resume", response_model=CheckoutResponse)
async def resume_checkout(
    correlation_key: str,
    customer: CustomerIdentity = Depends(require_customer),  # noqa: ARG001
) -> CheckoutResponse:
    return _checkout_response(CheckoutOrchestrator().resume(correlation_key))


@checkout_router.get("/{correlation_key}", response_model=CheckoutResponse)
async def get_checkout(correlation_key: str) -> CheckoutResponse:
    return _checkout_response(CheckoutOrchestrator().status(correlation_key))


@checkout_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    try:
        gateway = configure_fake_gateway(**body.model_dump())
    except TypeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        intent_should_succeed=gateway.intent_should_succeed,
        confirm_should_succeed=gateway.confirm_should_succeed,
        failure_reason=gateway.failure_reason,
        drop_connection_on=gateway.drop_connection_on,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/tracking/{order_number}", response_model=TrackingResponse)
async def track_order(order_number: str) -> TrackingResponse:
    return TrackingResponse(**tracking.track_by_order_number(order_number))


@order_router.get("/{key}", response_model=OrderResponse)
async def get_order(key: str) -> OrderResponse:
    """Fetch an order by internal id (24 hex chars) or by order number."""
    return _order_response(tracking.lookup(key))


@order_router.put("/{order_id}/status/{status}", response_model=StatusResponse)
async def advance_order_status(
    order_id: str, status: str, body: AdvanceStatusRequest | None = None
) -> StatusResponse:
    body = body or AdvanceStatusRequest()
    command = AdvanceOrderStatus(
        order_id=order_id,
        status=status,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        reason=body.reason,
    )
    new_status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=new_status)


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(order_id=order_id, reason=body.reason, cancelled_by="customer")
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="cancelled")


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["orders"])


@customer_router.get("/{customer_id}/orders", response_model=list[OrderResponse])
async def list_customer_orders(customer_id: str, status: str | None = None) -> list[OrderResponse]:
    return [_order_response(order) for order in tracking.list_for_customer(customer_id, status=status)]
