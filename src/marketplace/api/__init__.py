from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import (
    ROUTERS,
    account_router,
    branch_router,
    catalogue_router,
    coupon_router,
    dispute_router,
    finance_router,
    notification_router,
    order_router,
)

__all__ = [
    "ROUTERS",
    "account_router",
    "branch_router",
    "catalogue_router",
    "coupon_router",
    "dispute_router",
    "finance_router",
    "notification_router",
    "order_router",
    "register_error_handlers",
]
