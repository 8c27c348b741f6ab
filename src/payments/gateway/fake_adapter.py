"""Configurable fake payment gateway for development and testing.

Simulates a provider without any external calls. Each step can be told to
succeed, to refuse, or to drop the connection, which makes it useful for:
- Manual API testing via /checkout/gateway/configure
- Automated tests with predictable outcomes
"""

from uuid import uuid4

from payments.gateway.port import ConfirmationResult, GatewayUnavailable, IntentResult, PaymentGateway

_INTENT_PREFIXES = {"card": "pi", "upi": "upi", "cod": "cod", "wallet": "wallet"}


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.intent_should_succeed: bool = True
        self.confirm_should_succeed: bool = True
        self.drop_connection_on: str | None = None
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []
        self.intents: dict[str, dict] = {}
        self._by_idempotency_key: dict[str, str] = {}

    def configure(
        self,
        intent_should_succeed: bool = True,
        confirm_should_succeed: bool = True,
        failure_reason: str = "Card declined",
        drop_connection_on: str | None = None,
    ) -> None:
        """Configure gateway behavior at runtime.

        ``drop_connection_on`` names a step ("create_intent" or "confirm")
        that raises GatewayUnavailable instead of answering.
        """
        self.intent_should_succeed = intent_should_succeed
        self.confirm_should_succeed = confirm_should_succeed
        self.failure_reason = failure_reason
        self.drop_connection_on = drop_connection_on

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def create_intent(
        self,
        order_id: str,
        amount: float,
        method: str,
        idempotency_key: str | None = None,
    ) -> IntentResult:
        self.calls.append(
            {
                "method": "create_intent",
                "order_id": order_id,
                "amount": amount,
                "payment_method": method,
                "idempotency_key": idempotency_key,
            }
        )
        if self.drop_connection_on == "create_intent":
            raise GatewayUnavailable("Connection reset while creating payment intent")

        if idempotency_key and idempotency_key in self._by_idempotency_key:
            intent_id = self._by_idempotency_key[idempotency_key]
            return IntentResult(success=True, payment_intent_id=intent_id, status=self.intents[intent_id]["status"])

        if not self.intent_should_succeed:
            return IntentResult(success=False, status="failed", failure_reason=self.failure_reason)

        prefix = _INTENT_PREFIXES.get(method, "pi")
        intent_id = f"{prefix}_{uuid4().hex[:16]}"
        self.intents[intent_id] = {
            "order_id": order_id,
            "amount": amount,
            "method": method,
            "status": "requires_confirmation",
        }
        if idempotency_key:
            self._by_idempotency_key[idempotency_key] = intent_id
        return IntentResult(
            success=True,
            payment_intent_id=intent_id,
            status="requires_confirmation",
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
        )

    def confirm(self, payment_intent_id: str, order_id: str) -> ConfirmationResult:
        self.calls.append({"method": "confirm", "payment_intent_id": payment_intent_id, "order_id": order_id})
        if self.drop_connection_on == "confirm":
            raise GatewayUnavailable("Connection reset while confirming payment")

        intent = self.intents.get(payment_intent_id)
        if intent is None:
            return ConfirmationResult(success=False, status="failed", failure_reason="Payment intent not found")
        if intent["order_id"] != order_id:
            return ConfirmationResult(
                success=False, status="failed", failure_reason="Payment intent belongs to another order"
            )
        if intent["status"] in ("succeeded", "pending"):
            return ConfirmationResult(success=True, status=intent["status"])

        if not self.confirm_should_succeed:
            return ConfirmationResult(success=False, status="failed", failure_reason=self.failure_reason)

        # Cash on delivery is accepted now and collected later
        intent["status"] = "pending" if intent["method"] == "cod" else "succeeded"
        return ConfirmationResult(success=True, status=intent["status"])
