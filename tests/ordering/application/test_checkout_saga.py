"""Application tests for the checkout saga: happy paths, failures and resume."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.storage import get_storage
from ordering.checkout.attempt import AttemptStatus, CheckoutAttempt
from ordering.checkout.request import CartCheckout, CustomerIdentity, DirectCheckout
from ordering.checkout.saga import CheckoutOrchestrator
from ordering.exceptions import InvalidCoupon, InvalidTransition, LoyaltyBalanceChanged, PaymentError
from ordering.loyalty.ledger import EarnPoints, current_balance
from ordering.order.cancellation import CancelOrder
from ordering.order.order import Order, PaymentStatus
from ordering.order.state_machine import OrderStatus
from payments.gateway import configure_fake_gateway, get_gateway
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _cart(cart_id):
    return current_domain.repository_for(Cart).get(cart_id)


@pytest.fixture
def orchestrator():
    return CheckoutOrchestrator()


@pytest.fixture
def cart_id(make_cart):
    # 2 x 500 = 1000: free shipping, 180 tax, 1180 total
    return make_cart(("prod-001", "Enamel Pin", 500.0, 2))


class TestCartCheckout:
    def test_happy_path(self, orchestrator, cart_id, customer, shipping):
        result = orchestrator.checkout(
            CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001"
        )

        assert result.status == AttemptStatus.COMPLETED.value
        assert result.amount == 1180.0
        assert result.confirmation_path == f"/order-success/{result.order_id}"
        assert result.points_earned == 11

        order = _order(result.order_id)
        assert order.status == OrderStatus.CONFIRMED.value
        assert order.payment_status == PaymentStatus.COMPLETED.value
        assert order.payment_intent_id == result.payment_intent_id
        assert order.checkout_mode == "cart"
        assert len(_cart(cart_id).lines) == 0
        assert current_balance("cust-001") == 11

    def test_coupon_and_points_are_applied(self, orchestrator, cart_id, shipping):
        current_domain.process(EarnPoints(customer_id="cust-001", points=100), asynchronous=False)
        customer = CustomerIdentity(id="cust-001", loyalty_balance=0)

        result = orchestrator.checkout(
            CartCheckout(cart_id=cart_id),
            customer,
            shipping,
            "upi",
            coupon_code="welcome10",
            requested_points=40,
        )

        # 1000 + 0 + 180 - 100 = 1080, less 40 points
        assert result.pricing["coupon_code"] == "WELCOME10"
        assert result.amount == 1040.0
        assert result.points_redeemed == 40
        assert current_balance("cust-001") == 100 - 40 + 10

    def test_empty_cart_is_rejected(self, orchestrator, make_cart, customer, shipping):
        cart_id = make_cart()
        with pytest.raises(ValidationError) as exc:
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card")
        assert "cart" in exc.value.messages
        assert _orders() == []

    def test_invalid_shipping_has_no_side_effects(self, orchestrator, cart_id, customer, shipping):
        shipping["email"] = "not-an-email"
        with pytest.raises(ValidationError) as exc:
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")

        assert "email" in exc.value.messages
        assert _orders() == []
        assert get_gateway().calls == []
        assert len(_cart(cart_id).lines) == 1
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(CheckoutAttempt).get("chk-001")

    def test_unknown_coupon_has_no_side_effects(self, orchestrator, cart_id, customer, shipping):
        with pytest.raises(InvalidCoupon):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", coupon_code="BOGUS")
        assert _orders() == []

    def test_unknown_payment_method(self, orchestrator, cart_id, customer, shipping):
        with pytest.raises(ValidationError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "cheque")


class TestDirectCheckout:
    def test_direct_purchase_leaves_cart_alone(self, orchestrator, cart_id, customer, shipping):
        result = orchestrator.checkout(
            DirectCheckout(product_id="prod-777", name="Sticker Pack", unit_price=249.0, quantity=2),
            customer,
            shipping,
            "card",
        )

        order = _order(result.order_id)
        assert order.checkout_mode == "direct"
        assert [(item.product_id, item.quantity) for item in order.items] == [("prod-777", 2)]
        # 498 + 99 shipping + 90 tax
        assert result.amount == 687.0
        assert len(_cart(cart_id).lines) == 1

    def test_direct_quantity_is_capped(self, orchestrator, customer, shipping):
        with pytest.raises(ValidationError) as exc:
            orchestrator.checkout(
                DirectCheckout(product_id="prod-777", name="Sticker Pack", unit_price=10.0, quantity=16),
                customer,
                shipping,
                "card",
            )
        assert "quantity" in exc.value.messages


class TestPaymentFailureAndResume:
    def test_confirmation_failure_keeps_order_pending_and_cart_intact(self, orchestrator, cart_id, customer, shipping):
        configure_fake_gateway(confirm_should_succeed=False, failure_reason="Card declined")

        with pytest.raises(PaymentError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.status == AttemptStatus.FAILED.value
        assert attempt.failed_step == "confirm_payment"
        assert attempt.failure_reason == "Card declined"

        order = _order(attempt.order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.FAILED.value
        assert len(_cart(cart_id).lines) == 1

    def test_resume_reuses_order_and_payment_intent(self, orchestrator, cart_id, customer, shipping):
        gateway = configure_fake_gateway(confirm_should_succeed=False)
        with pytest.raises(PaymentError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")
        failed = orchestrator.status("chk-001")

        gateway.configure(confirm_should_succeed=True)
        result = orchestrator.resume("chk-001")

        assert result.status == AttemptStatus.COMPLETED.value
        assert result.order_id == failed.order_id
        assert result.payment_intent_id == failed.payment_intent_id
        assert len(_orders()) == 1
        assert len(gateway.calls_to("create_intent")) == 1
        assert len(gateway.calls_to("confirm")) == 2
        assert _order(result.order_id).status == OrderStatus.CONFIRMED.value
        assert len(_cart(cart_id).lines) == 0
        assert current_domain.repository_for(CheckoutAttempt).get("chk-001").attempts == 2

    def test_resubmitting_same_key_resumes_instead_of_duplicating(self, orchestrator, cart_id, customer, shipping):
        first = orchestrator.checkout(
            CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001"
        )
        second = orchestrator.checkout(
            CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001"
        )
        assert second.order_id == first.order_id
        assert len(_orders()) == 1
        assert len(get_gateway().calls_to("create_intent")) == 1

    def test_intent_refusal_fails_before_payment(self, orchestrator, cart_id, customer, shipping):
        configure_fake_gateway(intent_should_succeed=False, failure_reason="Insufficient funds")
        with pytest.raises(PaymentError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.failed_step == "request_payment"
        assert attempt.payment_intent_id is None
        assert _order(attempt.order_id).status == OrderStatus.PENDING.value

    def test_dropped_connection_is_a_payment_error(self, orchestrator, cart_id, customer, shipping):
        gateway = configure_fake_gateway(drop_connection_on="confirm")
        with pytest.raises(PaymentError) as exc:
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")
        assert "unavailable" in exc.value.messages["payment"][0]

        gateway.configure()
        result = orchestrator.resume("chk-001")
        assert result.status == AttemptStatus.COMPLETED.value
        assert len(gateway.calls_to("create_intent")) == 1

    def test_resume_unknown_key(self, orchestrator):
        with pytest.raises(ObjectNotFoundError):
            orchestrator.resume("chk-missing")


    def test_cancelled_order_is_not_completed_on_resume(self, orchestrator, cart_id, customer, shipping):
        gateway = configure_fake_gateway(confirm_should_succeed=False)
        with pytest.raises(PaymentError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")
        order_id = orchestrator.status("chk-001").order_id
        current_domain.process(CancelOrder(order_id=order_id, reason="Changed my mind"), asynchronous=False)

        gateway.configure()
        with pytest.raises(InvalidTransition):
            orchestrator.resume("chk-001")

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.status == AttemptStatus.FAILED.value
        assert attempt.failed_step == "confirm_payment"
        assert attempt.points_earned == 0
        assert _order(order_id).status == OrderStatus.CANCELLED.value
        assert len(gateway.calls_to("confirm")) == 1
        assert current_balance("cust-001") == 0
        assert len(_cart(cart_id).lines) == 1


class TestLoyaltyRedemption:
    @pytest.fixture
    def member(self):
        current_domain.process(EarnPoints(customer_id="cust-001", points=300), asynchronous=False)
        return CustomerIdentity(id="cust-001")

    def _checkout(self, orchestrator, cart_id, member, shipping):
        return orchestrator.checkout(
            CartCheckout(cart_id=cart_id),
            member,
            shipping,
            "card",
            requested_points=100,
            correlation_key="chk-001",
        )

    def test_points_are_redeemed_before_payment_is_confirmed(self, orchestrator, cart_id, member, shipping):
        gateway = configure_fake_gateway(drop_connection_on="confirm")
        with pytest.raises(PaymentError):
            self._checkout(orchestrator, cart_id, member, shipping)

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.points_redeemed == 100
        assert current_balance("cust-001") == 200

        # The outcome of the dropped call is unknown, so resuming keeps the redemption
        gateway.configure()
        result = orchestrator.resume("chk-001")
        assert result.status == AttemptStatus.COMPLETED.value
        assert result.points_redeemed == 100
        assert current_balance("cust-001") == 200 + 10

    def test_declined_payment_gives_points_back(self, orchestrator, cart_id, member, shipping):
        configure_fake_gateway(confirm_should_succeed=False)
        with pytest.raises(PaymentError):
            self._checkout(orchestrator, cart_id, member, shipping)

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.points_redeemed == 0
        assert current_balance("cust-001") == 300

    def test_resume_after_decline_redeems_again(self, orchestrator, cart_id, member, shipping):
        gateway = configure_fake_gateway(confirm_should_succeed=False)
        with pytest.raises(PaymentError):
            self._checkout(orchestrator, cart_id, member, shipping)

        gateway.configure()
        result = orchestrator.resume("chk-001")

        # 1180 less 100 points = 1080, earning 10
        assert result.status == AttemptStatus.COMPLETED.value
        assert result.amount == 1080.0
        assert result.points_redeemed == 100
        assert current_balance("cust-001") == 300 - 100 + 10

    def test_balance_change_fails_before_any_charge(self, orchestrator, cart_id, member, shipping):
        gateway = configure_fake_gateway(confirm_should_succeed=False)
        with pytest.raises(PaymentError):
            self._checkout(orchestrator, cart_id, member, shipping)

        # Points move while the shopper is away
        current_domain.process(EarnPoints(customer_id="cust-001", points=5), asynchronous=False)
        gateway.configure()

        for _ in range(2):
            with pytest.raises(LoyaltyBalanceChanged):
                orchestrator.resume("chk-001")

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.failed_step == "redeem_points"
        assert _order(attempt.order_id).status == OrderStatus.PENDING.value
        assert len(gateway.calls_to("confirm")) == 1
        assert gateway.intents[attempt.payment_intent_id]["status"] == "requires_confirmation"
        assert current_balance("cust-001") == 305


class TestFinalizeRetry:
    def test_points_are_awarded_once_when_cart_clearing_fails(
        self, orchestrator, cart_id, customer, shipping, monkeypatch
    ):
        original = CheckoutOrchestrator._clear_cart

        def refuse_once(self, attempt):
            monkeypatch.setattr(CheckoutOrchestrator, "_clear_cart", original)
            raise ValidationError({"cart": ["Cart is locked"]})

        monkeypatch.setattr(CheckoutOrchestrator, "_clear_cart", refuse_once)
        with pytest.raises(ValidationError):
            orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "card", correlation_key="chk-001")

        attempt = current_domain.repository_for(CheckoutAttempt).get("chk-001")
        assert attempt.failed_step == "finalize"
        assert attempt.points_earned == 11
        assert current_balance("cust-001") == 11

        result = orchestrator.resume("chk-001")
        assert result.status == AttemptStatus.COMPLETED.value
        assert result.points_earned == 11
        assert current_balance("cust-001") == 11
        assert len(_cart(cart_id).lines) == 0


class TestCashOnDelivery:
    def test_cod_order_confirmed_with_payment_pending(self, orchestrator, cart_id, customer, shipping):
        result = orchestrator.checkout(CartCheckout(cart_id=cart_id), customer, shipping, "COD")

        order = _order(result.order_id)
        assert order.status == OrderStatus.CONFIRMED.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.payment_intent_id.startswith("cod_")
        assert result.points_earned == 0
