"""Loyalty account aggregate: the customer's points ledger.

Points are redeemed at checkout with compare-and-set semantics: the caller
states the balance it priced against, and the redemption is refused with
LoyaltyBalanceChanged if the balance moved in the meantime.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from ordering.domain import ordering
from ordering.exceptions import LoyaltyBalanceChanged
from ordering.loyalty.events import PointsEarned, PointsRedeemed, PointsRestored

POINTS_PER_RUPEES = 100  # one point per ₹100 paid


def points_earned_for(amount_paid, payment_method) -> int:
    """Points awarded for a confirmed order. Cash-on-delivery orders earn nothing."""
    if payment_method == "cod" or amount_paid <= 0:
        return 0
    return int(amount_paid // POINTS_PER_RUPEES)


@ordering.aggregate
class LoyaltyAccount:
    customer_id = Identifier(identifier=True, required=True)
    balance = Integer(default=0, min_value=0)
    lifetime_earned = Integer(default=0)
    lifetime_redeemed = Integer(default=0)
    updated_at = DateTime()

    @classmethod
    def open(cls, customer_id, opening_balance=0):
        return cls(
            customer_id=customer_id,
            balance=max(int(opening_balance or 0), 0),
            updated_at=datetime.now(UTC),
        )

    def redeem(self, points, expected_balance, order_id=None):
        if points <= 0:
            raise ValidationError({"points": ["Points to redeem must be positive"]})
        if self.balance != expected_balance:
            raise LoyaltyBalanceChanged(
                {"loyalty_points": [f"Loyalty balance changed from {expected_balance} to {self.balance}"]}
            )
        if points > self.balance:
            raise ValidationError({"points": ["Not enough loyalty points"]})

        self.balance -= points
        self.lifetime_redeemed += points
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PointsRedeemed(
                customer_id=self.customer_id,
                order_id=order_id,
                points=points,
                balance=self.balance,
                redeemed_at=self.updated_at,
            )
        )

    def restore(self, points, order_id=None):
        """Give back points from a redemption whose payment did not go through."""
        if points <= 0:
            return
        self.balance += points
        self.lifetime_redeemed -= points
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PointsRestored(
                customer_id=self.customer_id,
                order_id=order_id,
                points=points,
                balance=self.balance,
                restored_at=self.updated_at,
            )
        )

    def earn(self, points, order_id=None):
        if points <= 0:
            return
        self.balance += points
        self.lifetime_earned += points
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PointsEarned(
                customer_id=self.customer_id,
                order_id=order_id,
                points=points,
                balance=self.balance,
                earned_at=self.updated_at,
            )
        )
