"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
between users. State tracks ids returned by creation endpoints so
follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class SellerState:
    """Tracks a seller from application to a stocked storefront."""

    user_id: str | None = None
    request_id: str | None = None
    branch_id: str | None = None
    product: dict | None = None
    coupon_code: str | None = None


@dataclass
class BuyerState:
    """Tracks a buyer's checkout and what followed it."""

    user_id: str | None = None
    order_ids: list[str] = field(default_factory=list)
    dispute_id: str | None = None
    stock_rejections: int = 0
