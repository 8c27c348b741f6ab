"""Per-user state for the checkout journeys.

Each Locust user keeps its own ids; nothing is shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    customer_id: str
    session_id: str
    loyalty_balance: int = 0
    cart_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    correlation_key: str | None = None
    order_id: str | None = None
    order_number: str | None = None

    @property
    def headers(self) -> dict:
        return {"X-Customer-Id": self.customer_id, "X-Loyalty-Balance": str(self.loyalty_balance)}
