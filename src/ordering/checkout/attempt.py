"""CheckoutAttempt: the persisted state of one checkout saga.

Keyed by the client's correlation key. Each step records its outcome here
before the next step runs, so an interrupted checkout can be resumed from
the first step that has not completed.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


class AttemptStatus(Enum):
    STARTED = "started"
    ORDER_CREATED = "order_created"
    PAYMENT_REQUESTED = "payment_requested"
    COMPLETED = "completed"
    FAILED = "failed"


@ordering.aggregate
class CheckoutAttempt:
    correlation_key = String(identifier=True, max_length=255)
    customer_id = Identifier(required=True)
    mode = String(required=True, max_length=10)
    cart_id = Identifier()
    items = Text(required=True)  # JSON: list of item dicts
    shipping = Text(required=True)  # JSON: shipping dict
    pricing = Text(required=True)  # JSON: PricingBreakdown.to_dict()
    payment_method = String(required=True, max_length=20)
    amount = Float(default=0.0)
    loyalty_balance_seen = Integer(default=0)
    points_to_redeem = Integer(default=0)
    points_redeemed = Integer(default=0)
    points_earned = Integer(default=0)
    order_id = Identifier()
    order_number = String(max_length=50)
    payment_intent_id = String(max_length=255)
    status = String(choices=AttemptStatus, default=AttemptStatus.STARTED.value)
    failed_step = String(max_length=50)
    failure_reason = String(max_length=500)
    attempts = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def start(cls, correlation_key, customer_id, request, shipping, breakdown, payment_method, loyalty_balance):
        now = datetime.now(UTC)
        return cls(
            correlation_key=correlation_key,
            customer_id=customer_id,
            mode=request.mode,
            cart_id=request.cart_id,
            items=json.dumps(request.items_payload()),
            shipping=json.dumps(shipping),
            pricing=json.dumps(breakdown.to_dict()),
            payment_method=payment_method,
            amount=breakdown.effective_total,
            loyalty_balance_seen=loyalty_balance,
            points_to_redeem=breakdown.points_applied,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_completed(self):
        return self.status == AttemptStatus.COMPLETED.value

    @property
    def pricing_data(self) -> dict:
        return json.loads(self.pricing)

    def _touch(self, status=None):
        if status is not None:
            self.status = status.value
        self.updated_at = datetime.now(UTC)

    def begin_run(self):
        self.attempts = (self.attempts or 0) + 1
        self.failed_step = None
        self.failure_reason = None
        self._touch()

    def record_order(self, order_id, order_number):
        self.order_id = order_id
        self.order_number = order_number
        self._touch(AttemptStatus.ORDER_CREATED)

    def record_payment_intent(self, payment_intent_id):
        self.payment_intent_id = payment_intent_id
        self._touch(AttemptStatus.PAYMENT_REQUESTED)

    def record_points_redeemed(self, points):
        self.points_redeemed = points
        self._touch()

    def record_points_restored(self):
        self.points_redeemed = 0
        self._touch()

    def record_points_earned(self, points):
        self.points_earned = points
        self._touch()

    def complete(self):
        self._touch(AttemptStatus.COMPLETED)
        self.completed_at = self.updated_at

    def fail(self, step, reason):
        self.failed_step = step
        self.failure_reason = reason
        self._touch(AttemptStatus.FAILED)
