"""Checkout saga: turns a cart or a direct purchase into a confirmed order.

Flow:
    1. Validate shipping and payment method (no side effects on failure)
    2. Normalize the entry point to a CheckoutRequest and price it
    3. Create the pending order (idempotent on the correlation key)
    4. Open a payment intent, unless the attempt already holds one
    5. Redeem loyalty points (compare-and-set) before any money moves
    6. Confirm payment; a refusal gives the points back and leaves the order
       pending and the cart intact
    7. Finalize: confirm the order, award points, clear the cart

Each step records its outcome on the CheckoutAttempt before the next one
runs. ``resume()`` re-enters the flow at the first step that has not
completed, reusing the stored order and payment intent.
"""

import json
from dataclasses import dataclass
from uuid import uuid4

import structlog
from payments.gateway import GatewayUnavailable, PaymentGateway, get_gateway
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.cart.management import ClearCart
from ordering.checkout.attempt import CheckoutAttempt
from ordering.checkout.request import CustomerIdentity, normalize
from ordering.checkout.validation import clean_payment_method, clean_shipping
from ordering.exceptions import InvalidTransition, PaymentError
from ordering.loyalty.account import points_earned_for
from ordering.loyalty.ledger import EarnPoints, RedeemPoints, RestorePoints, current_balance
from ordering.order.creation import PlaceOrder
from ordering.order.order import CheckoutMode, Order
from ordering.order.payment import ConfirmOrderPayment, RecordPaymentFailure, RecordPaymentRequested
from ordering.order.state_machine import OrderStatus
from ordering.pricing.engine import price
from ordering.utils.logging import bind_checkout_context, clear_checkout_context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    correlation_key: str
    status: str
    order_id: str | None
    order_number: str | None
    payment_intent_id: str | None
    amount: float
    pricing: dict
    points_redeemed: int = 0
    points_earned: int = 0

    @property
    def confirmation_path(self) -> str | None:
        return f"/order-success/{self.order_id}" if self.order_id else None

    @classmethod
    def from_attempt(cls, attempt: CheckoutAttempt) -> "CheckoutResult":
        return cls(
            correlation_key=attempt.correlation_key,
            status=attempt.status,
            order_id=attempt.order_id,
            order_number=attempt.order_number,
            payment_intent_id=attempt.payment_intent_id,
            amount=attempt.amount,
            pricing=attempt.pricing_data,
            points_redeemed=attempt.points_redeemed or 0,
            points_earned=attempt.points_earned or 0,
        )


def _reason(exc) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return "; ".join(str(message) for values in messages.values() for message in values)
    return str(messages or exc)


class CheckoutOrchestrator:
    def __init__(self, gateway: PaymentGateway | None = None) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    def checkout(
        self,
        entry,
        customer: CustomerIdentity,
        shipping: dict,
        payment_method: str,
        coupon_code: str | None = None,
        requested_points: int = 0,
        correlation_key: str | None = None,
    ) -> CheckoutResult:
        """Run a new checkout, or pick up the existing attempt for ``correlation_key``."""
        correlation_key = correlation_key or uuid4().hex
        existing = self._find_attempt(correlation_key)
        if existing is not None:
            logger.info("Checkout already started, resuming", correlation_key=correlation_key)
            return self._drive(existing)

        cleaned_shipping = clean_shipping(shipping)
        method = clean_payment_method(payment_method)
        request = normalize(entry)

        balance = current_balance(customer.id, fallback=customer.loyalty_balance)
        breakdown = price(
            request.items,
            coupon_code=coupon_code,
            requested_points=requested_points,
            loyalty_balance=balance,
        )

        attempt = CheckoutAttempt.start(
            correlation_key=correlation_key,
            customer_id=customer.id,
            request=request,
            shipping=cleaned_shipping,
            breakdown=breakdown,
            payment_method=method,
            loyalty_balance=balance,
        )
        self._save(attempt)
        logger.info(
            "Checkout started",
            correlation_key=correlation_key,
            customer_id=customer.id,
            mode=request.mode,
            items=len(request.items),
            amount=breakdown.effective_total,
        )
        return self._drive(attempt)

    def resume(self, correlation_key: str) -> CheckoutResult:
        """Continue an interrupted or failed checkout. Raises ObjectNotFoundError for unknown keys."""
        attempt = current_domain.repository_for(CheckoutAttempt).get(correlation_key)
        return self._drive(attempt)

    def status(self, correlation_key: str) -> CheckoutResult:
        return CheckoutResult.from_attempt(current_domain.repository_for(CheckoutAttempt).get(correlation_key))

    # -------------------------------------------------------------------
    # Saga
    # -------------------------------------------------------------------
    def _find_attempt(self, correlation_key):
        try:
            return current_domain.repository_for(CheckoutAttempt).get(correlation_key)
        except ObjectNotFoundError:
            return None

    def _save(self, attempt: CheckoutAttempt) -> None:
        current_domain.repository_for(CheckoutAttempt).add(attempt)

    def _load_order(self, attempt: CheckoutAttempt) -> Order:
        return current_domain.repository_for(Order).get(attempt.order_id)

    def _drive(self, attempt: CheckoutAttempt) -> CheckoutResult:
        if attempt.is_completed:
            return CheckoutResult.from_attempt(attempt)

        bind_checkout_context(correlation_key=attempt.correlation_key)
        attempt.begin_run()
        self._save(attempt)

        step = "create_order"
        try:
            self._create_order(attempt)
            step = "request_payment"
            self._request_payment(attempt)
            step = "redeem_points"
            self._redeem_points(attempt)
            step = "confirm_payment"
            self._confirm_payment(attempt)
            step = "finalize"
            self._finalize(attempt)
        except (PaymentError, ValidationError) as exc:
            attempt.fail(step, _reason(exc))
            self._save(attempt)
            logger.warning(
                "Checkout step failed",
                step=step,
                order_id=attempt.order_id,
                reason=attempt.failure_reason,
                attempts=attempt.attempts,
            )
            raise
        finally:
            clear_checkout_context()

        return CheckoutResult.from_attempt(attempt)

    def _create_order(self, attempt: CheckoutAttempt) -> None:
        if attempt.order_id:
            return

        placed = current_domain.process(
            PlaceOrder(
                correlation_key=attempt.correlation_key,
                customer_id=attempt.customer_id,
                checkout_mode=attempt.mode,
                cart_id=attempt.cart_id,
                items=attempt.items,
                shipping=attempt.shipping,
                pricing=json.dumps(self._order_pricing(attempt)),
                payment_method=attempt.payment_method,
            ),
            asynchronous=False,
        )
        attempt.record_order(placed["order_id"], placed["order_number"])
        self._save(attempt)
        bind_checkout_context(order_id=attempt.order_id)
        logger.info("Order created", order_id=attempt.order_id, order_number=attempt.order_number)

    @staticmethod
    def _order_pricing(attempt: CheckoutAttempt) -> dict:
        pricing = attempt.pricing_data
        return {
            "subtotal": pricing["subtotal"],
            "shipping_fee": pricing["shipping_fee"],
            "tax": pricing["tax"],
            "coupon_code": pricing.get("coupon_code"),
            "coupon_discount": pricing["coupon_discount"],
            "points_applied": pricing["points_applied"],
            "total": pricing["total"],
            "effective_total": pricing["effective_total"],
        }

    def _request_payment(self, attempt: CheckoutAttempt) -> None:
        if attempt.payment_intent_id:
            logger.info("Reusing payment intent", payment_intent_id=attempt.payment_intent_id)
            return

        order = self._load_order(attempt)
        if order.status != OrderStatus.PENDING.value:
            return
        if order.payment_intent_id:
            # Recorded on the order before the attempt was saved
            attempt.record_payment_intent(order.payment_intent_id)
            self._save(attempt)
            return

        try:
            result = self.gateway.create_intent(
                order_id=attempt.order_id,
                amount=attempt.amount,
                method=attempt.payment_method,
                idempotency_key=attempt.correlation_key,
            )
        except GatewayUnavailable as exc:
            raise PaymentError({"payment": [f"Payment gateway unavailable: {exc}"]}) from exc
        if not result.success or not result.payment_intent_id:
            raise PaymentError({"payment": [result.failure_reason or "Could not start payment"]})

        current_domain.process(
            RecordPaymentRequested(order_id=attempt.order_id, payment_intent_id=result.payment_intent_id),
            asynchronous=False,
        )
        attempt.record_payment_intent(result.payment_intent_id)
        self._save(attempt)
        logger.info(
            "Payment intent created",
            payment_intent_id=result.payment_intent_id,
            amount=attempt.amount,
            method=attempt.payment_method,
        )

    def _redeem_points(self, attempt: CheckoutAttempt) -> None:
        if not attempt.points_to_redeem or attempt.points_redeemed:
            return
        if self._load_order(attempt).status != OrderStatus.PENDING.value:
            return

        current_domain.process(
            RedeemPoints(
                customer_id=attempt.customer_id,
                points=attempt.points_to_redeem,
                expected_balance=attempt.loyalty_balance_seen,
                order_id=attempt.order_id,
            ),
            asynchronous=False,
        )
        attempt.record_points_redeemed(attempt.points_to_redeem)
        self._save(attempt)
        logger.info("Loyalty points redeemed", points=attempt.points_redeemed)

    def _restore_points(self, attempt: CheckoutAttempt) -> None:
        if not attempt.points_redeemed:
            return

        points = attempt.points_redeemed
        current_domain.process(
            RestorePoints(customer_id=attempt.customer_id, points=points, order_id=attempt.order_id),
            asynchronous=False,
        )
        attempt.record_points_restored()
        self._save(attempt)
        logger.info("Loyalty points restored", points=points)

    def _confirm_payment(self, attempt: CheckoutAttempt) -> None:
        order = self._load_order(attempt)
        if order.status == OrderStatus.CONFIRMED.value:
            return
        if order.status != OrderStatus.PENDING.value:
            self._restore_points(attempt)
            raise InvalidTransition({"status": [f"Order is {order.status}; checkout cannot continue"]})
        if not attempt.payment_intent_id:
            raise PaymentError({"payment": ["No payment intent to confirm"]})

        try:
            result = self.gateway.confirm(attempt.payment_intent_id, attempt.order_id)
        except GatewayUnavailable as exc:
            # The charge may have gone through; redeemed points stay with the order
            raise PaymentError({"payment": [f"Payment gateway unavailable: {exc}"]}) from exc

        if not result.success:
            reason = result.failure_reason or "Payment was declined"
            current_domain.process(
                RecordPaymentFailure(order_id=attempt.order_id, reason=reason),
                asynchronous=False,
            )
            self._restore_points(attempt)
            raise PaymentError({"payment": [reason]})

        logger.info("Payment confirmed", payment_intent_id=attempt.payment_intent_id, gateway_status=result.status)

    def _finalize(self, attempt: CheckoutAttempt) -> None:
        order = self._load_order(attempt)
        if order.status == OrderStatus.PENDING.value:
            current_domain.process(
                ConfirmOrderPayment(order_id=attempt.order_id, payment_intent_id=attempt.payment_intent_id),
                asynchronous=False,
            )
        elif order.status != OrderStatus.CONFIRMED.value:
            raise InvalidTransition({"status": [f"Order is {order.status}; checkout cannot continue"]})

        if not attempt.points_earned:
            earned = points_earned_for(attempt.amount, attempt.payment_method)
            if earned:
                current_domain.process(
                    EarnPoints(customer_id=attempt.customer_id, points=earned, order_id=attempt.order_id),
                    asynchronous=False,
                )
                attempt.record_points_earned(earned)
                self._save(attempt)

        self._clear_cart(attempt)

        attempt.complete()
        self._save(attempt)
        logger.info(
            "Checkout completed",
            order_id=attempt.order_id,
            order_number=attempt.order_number,
            amount=attempt.amount,
            points_earned=attempt.points_earned,
        )

    def _clear_cart(self, attempt: CheckoutAttempt) -> None:
        if attempt.mode == CheckoutMode.CART.value and attempt.cart_id:
            current_domain.process(ClearCart(cart_id=attempt.cart_id, reason="checkout"), asynchronous=False)
