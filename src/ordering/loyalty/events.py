"""Domain events for the LoyaltyAccount aggregate."""

from protean.fields import DateTime, Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="LoyaltyAccount")
class PointsRedeemed:
    __version__ = "v1"

    customer_id = Identifier(required=True)
    order_id = Identifier()
    points = Integer(required=True)
    balance = Integer(required=True)
    redeemed_at = DateTime(required=True)


@ordering.event(part_of="LoyaltyAccount")
class PointsRestored:
    __version__ = "v1"

    customer_id = Identifier(required=True)
    order_id = Identifier()
    points = Integer(required=True)
    balance = Integer(required=True)
    restored_at = DateTime(required=True)


@ordering.event(part_of="LoyaltyAccount")
class PointsEarned:
    __version__ = "v1"

    customer_id = Identifier(required=True)
    order_id = Identifier()
    points = Integer(required=True)
    balance = Integer(required=True)
    earned_at = DateTime(required=True)
