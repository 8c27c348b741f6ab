"""Order state machine.

    pending → confirmed → processing → shipped → out_for_delivery → delivered
    pending | confirmed → cancelled

Forward moves follow the sequence one step at a time. Cancellation is only
possible before fulfilment starts; shipped orders need a return flow
instead. ``delivered`` and ``cancelled`` are terminal.
"""

from enum import Enum

from ordering.exceptions import InvalidTransition


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


FORWARD_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

CANCELLABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def _build_transitions():
    transitions = {status: set() for status in OrderStatus}
    for current, following in zip(FORWARD_SEQUENCE, FORWARD_SEQUENCE[1:]):
        transitions[current].add(following)
    for status in CANCELLABLE_STATES:
        transitions[status].add(OrderStatus.CANCELLED)
    return {status: frozenset(targets) for status, targets in transitions.items()}


VALID_TRANSITIONS = _build_transitions()


def as_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidTransition({"status": [f"Unknown order status: {value!r}"]}) from None


def allowed_transitions(current) -> frozenset:
    return VALID_TRANSITIONS[as_status(current)]


def can_transition(current, target) -> bool:
    return as_status(target) in allowed_transitions(current)


def assert_can_transition(current, target) -> None:
    """Raise InvalidTransition unless current → target is a legal move."""
    current_status, target_status = as_status(current), as_status(target)
    if current_status in TERMINAL_STATES:
        raise InvalidTransition(
            {"status": [f"Order is {current_status.value}; no further status changes are allowed"]}
        )
    if target_status not in VALID_TRANSITIONS[current_status]:
        raise InvalidTransition(
            {"status": [f"Cannot transition from {current_status.value} to {target_status.value}"]}
        )


def next_status(current) -> OrderStatus | None:
    """The next forward status, or None at the end of the sequence or when cancelled."""
    status = as_status(current)
    if status not in FORWARD_SEQUENCE:
        return None
    index = FORWARD_SEQUENCE.index(status)
    return FORWARD_SEQUENCE[index + 1] if index + 1 < len(FORWARD_SEQUENCE) else None


def is_terminal(status) -> bool:
    return as_status(status) in TERMINAL_STATES
