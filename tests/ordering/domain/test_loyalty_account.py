"""Tests for the LoyaltyAccount aggregate."""

import pytest
from ordering.exceptions import LoyaltyBalanceChanged
from ordering.loyalty.account import LoyaltyAccount, points_earned_for
from ordering.loyalty.events import PointsEarned, PointsRedeemed, PointsRestored
from protean.exceptions import ValidationError


def _account(balance=300):
    account = LoyaltyAccount.open("cust-001", opening_balance=balance)
    account._events.clear()
    return account


class TestRedeem:
    def test_redeem_with_matching_balance(self):
        account = _account()
        account.redeem(100, expected_balance=300, order_id="ord-1")
        assert account.balance == 200
        assert account.lifetime_redeemed == 100
        event = account._events[-1]
        assert isinstance(event, PointsRedeemed)
        assert event.balance == 200

    def test_redeem_with_stale_balance_fails(self):
        account = _account()
        with pytest.raises(LoyaltyBalanceChanged) as exc:
            account.redeem(100, expected_balance=250)
        assert "loyalty_points" in exc.value.messages
        assert account.balance == 300

    def test_redeem_more_than_balance_fails(self):
        account = _account(50)
        with pytest.raises(ValidationError):
            account.redeem(80, expected_balance=50)

    def test_redeem_non_positive_fails(self):
        with pytest.raises(ValidationError):
            _account().redeem(0, expected_balance=300)


class TestEarnAndRestore:
    def test_earn(self):
        account = _account(0)
        account.earn(11)
        assert account.balance == 11
        assert isinstance(account._events[-1], PointsEarned)

    def test_restore(self):
        account = _account()
        account.redeem(100, expected_balance=300)
        account.restore(100)
        assert account.balance == 300
        assert account.lifetime_redeemed == 0
        assert isinstance(account._events[-1], PointsRestored)

    def test_zero_points_is_noop(self):
        account = _account()
        account.earn(0)
        account.restore(0)
        assert account._events == []

    def test_negative_opening_balance_is_clamped(self):
        assert LoyaltyAccount.open("cust-002", opening_balance=-5).balance == 0


class TestPointsEarned:
    def test_one_point_per_hundred_rupees(self):
        assert points_earned_for(1180.0, "card") == 11
        assert points_earned_for(99.99, "upi") == 0

    def test_cash_on_delivery_earns_nothing(self):
        assert points_earned_for(5000.0, "cod") == 0
