"""Loyalty ledger: commands and handler.

Accounts are opened lazily, seeded with the balance the identity context
reported when the customer first checked out.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.loyalty.account import LoyaltyAccount


@ordering.command(part_of="LoyaltyAccount")
class RedeemPoints:
    customer_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    expected_balance = Integer(required=True, min_value=0)
    order_id = Identifier()


@ordering.command(part_of="LoyaltyAccount")
class RestorePoints:
    customer_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    order_id = Identifier()


@ordering.command(part_of="LoyaltyAccount")
class EarnPoints:
    customer_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    order_id = Identifier()


def current_balance(customer_id, fallback=0) -> int:
    """The ledger balance, or ``fallback`` for a customer without an account yet."""
    try:
        return current_domain.repository_for(LoyaltyAccount).get(str(customer_id)).balance
    except ObjectNotFoundError:
        return max(int(fallback or 0), 0)


def _account_for(repo, customer_id, opening_balance=0):
    try:
        return repo.get(str(customer_id))
    except ObjectNotFoundError:
        return LoyaltyAccount.open(customer_id, opening_balance)


@ordering.command_handler(part_of=LoyaltyAccount)
class LoyaltyLedgerHandler:
    @handle(RedeemPoints)
    def redeem_points(self, command):
        repo = current_domain.repository_for(LoyaltyAccount)
        account = _account_for(repo, command.customer_id, opening_balance=command.expected_balance)
        account.redeem(command.points, command.expected_balance, order_id=command.order_id)
        repo.add(account)
        return account.balance

    @handle(RestorePoints)
    def restore_points(self, command):
        repo = current_domain.repository_for(LoyaltyAccount)
        account = _account_for(repo, command.customer_id)
        account.restore(command.points, order_id=command.order_id)
        repo.add(account)
        return account.balance

    @handle(EarnPoints)
    def earn_points(self, command):
        repo = current_domain.repository_for(LoyaltyAccount)
        account = _account_for(repo, command.customer_id)
        account.earn(command.points, order_id=command.order_id)
        repo.add(account)
        return account.balance
