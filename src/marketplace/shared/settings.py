"""Tunables from the ``[custom]`` section of ``domain.toml``."""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

_DEFAULTS = {
    "STOCK_POLICY": "reject",
    "FREE_PLAN_PRODUCT_LIMIT": 10,
    "PRO_PLAN_PRODUCT_LIMIT": 100,
    "INVENTORY_LOG_PAGE_SIZE": 100,
    "DEFAULT_CURRENCY": "USD",
}


def setting(name: str, default=None):
    custom = current_domain.config.get("custom") or {}
    if name in custom:
        return custom[name]
    return _DEFAULTS.get(name, default)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes coming back from storage as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
