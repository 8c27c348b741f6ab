"""Payment gateway factory.

The orchestrator resolves its gateway through get_gateway(). The
FakeGateway is the default until set_gateway() installs a real adapter.
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import (
    ConfirmationResult,
    GatewayUnavailable,
    IntentResult,
    PaymentGateway,
)

__all__ = [
    "ConfirmationResult",
    "FakeGateway",
    "GatewayUnavailable",
    "IntentResult",
    "PaymentGateway",
    "configure_fake_gateway",
    "get_gateway",
    "reset_gateway",
    "set_gateway",
]

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Forget the active gateway. The next get_gateway() builds a fresh FakeGateway."""
    global _current_gateway
    _current_gateway = None


def configure_fake_gateway(**behaviour) -> FakeGateway:
    """Reconfigure the active gateway, which must be a FakeGateway."""
    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise TypeError(f"{type(gateway).__name__} cannot be reconfigured at runtime")
    gateway.configure(**behaviour)
    return gateway
