"""Tests for the configurable fake payment gateway and the gateway factory."""

import pytest
from payments.gateway import (
    FakeGateway,
    GatewayUnavailable,
    PaymentGateway,
    configure_fake_gateway,
    get_gateway,
    reset_gateway,
    set_gateway,
)


@pytest.fixture()
def gateway():
    return FakeGateway()


class TestCreateIntent:
    def test_intent_ids_carry_method_prefix(self, gateway):
        assert gateway.create_intent("ord-1", 100.0, "card").payment_intent_id.startswith("pi_")
        assert gateway.create_intent("ord-2", 100.0, "upi").payment_intent_id.startswith("upi_")
        assert gateway.create_intent("ord-3", 100.0, "cod").payment_intent_id.startswith("cod_")

    def test_same_idempotency_key_returns_same_intent(self, gateway):
        first = gateway.create_intent("ord-1", 100.0, "card", idempotency_key="chk-1")
        second = gateway.create_intent("ord-1", 100.0, "card", idempotency_key="chk-1")
        assert first.payment_intent_id == second.payment_intent_id
        assert len(gateway.intents) == 1

    def test_refusal(self, gateway):
        gateway.configure(intent_should_succeed=False, failure_reason="Insufficient funds")
        result = gateway.create_intent("ord-1", 100.0, "card")
        assert not result.success
        assert result.failure_reason == "Insufficient funds"

    def test_dropped_connection(self, gateway):
        gateway.configure(drop_connection_on="create_intent")
        with pytest.raises(GatewayUnavailable):
            gateway.create_intent("ord-1", 100.0, "card")


class TestConfirm:
    def test_card_payment_succeeds(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "card")
        result = gateway.confirm(intent.payment_intent_id, "ord-1")
        assert result.success
        assert result.status == "succeeded"

    def test_cash_on_delivery_stays_pending(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "cod")
        assert gateway.confirm(intent.payment_intent_id, "ord-1").status == "pending"

    def test_declined_then_retried(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "card")
        gateway.configure(confirm_should_succeed=False)
        assert not gateway.confirm(intent.payment_intent_id, "ord-1").success

        gateway.configure()
        assert gateway.confirm(intent.payment_intent_id, "ord-1").success
        assert len(gateway.calls_to("confirm")) == 2

    def test_confirming_twice_is_harmless(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "card")
        gateway.confirm(intent.payment_intent_id, "ord-1")
        gateway.configure(confirm_should_succeed=False)
        assert gateway.confirm(intent.payment_intent_id, "ord-1").success

    def test_unknown_intent(self, gateway):
        result = gateway.confirm("pi_missing", "ord-1")
        assert not result.success
        assert result.failure_reason == "Payment intent not found"

    def test_intent_for_another_order(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "card")
        assert not gateway.confirm(intent.payment_intent_id, "ord-2").success

    def test_dropped_connection(self, gateway):
        intent = gateway.create_intent("ord-1", 100.0, "card")
        gateway.configure(drop_connection_on="confirm")
        with pytest.raises(GatewayUnavailable):
            gateway.confirm(intent.payment_intent_id, "ord-1")


class _StubGateway(PaymentGateway):
    def create_intent(self, order_id, amount, method, idempotency_key=None):
        raise NotImplementedError

    def confirm(self, payment_intent_id, order_id):
        raise NotImplementedError


class TestGatewayFactory:
    def test_defaults_to_fake_gateway(self):
        assert isinstance(get_gateway(), FakeGateway)
        assert get_gateway() is get_gateway()

    def test_reset_builds_a_fresh_gateway(self):
        first = get_gateway()
        reset_gateway()
        assert get_gateway() is not first

    def test_configure_fake_gateway(self):
        gateway = configure_fake_gateway(confirm_should_succeed=False)
        assert gateway is get_gateway()
        assert gateway.confirm_should_succeed is False

    def test_configure_rejects_other_gateways(self):
        set_gateway(_StubGateway())
        with pytest.raises(TypeError):
            configure_fake_gateway(confirm_should_succeed=False)
