"""Payment gateway port (abstract interface).

Checkout talks to payment providers in two steps: open an intent for an
order's amount, then confirm it. Adapters implement this contract so the
orchestrator never depends on a concrete provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GatewayUnavailable(Exception):
    """The gateway could not be reached, or the connection dropped mid-call.

    Distinct from a refused payment: the outcome of the call is unknown and
    the caller may retry with the same payment intent.
    """


@dataclass(frozen=True)
class IntentResult:
    """Result of opening a payment intent."""

    success: bool
    payment_intent_id: str | None = None
    status: str | None = None
    client_secret: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class ConfirmationResult:
    """Result of confirming a payment intent."""

    success: bool
    status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(
        self,
        order_id: str,
        amount: float,
        method: str,
        idempotency_key: str | None = None,
    ) -> IntentResult:
        """Open a payment intent for an order.

        Repeating a call with the same idempotency key returns the intent
        opened the first time.
        """

    @abstractmethod
    def confirm(self, payment_intent_id: str, order_id: str) -> ConfirmationResult:
        """Confirm a previously opened intent. Confirming twice is harmless."""
