"""Country / payment configuration port (read-only)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

_ALIASES = {
    "dubai": "uae",
    "united arab emirates": "uae",
}

CASH_ON_DELIVERY = "cod"


def normalize_country(name: str | None) -> str:
    """Lower-case, trimmed country key with known aliases folded together."""
    if not name:
        return ""
    key = name.strip().lower()
    return _ALIASES.get(key, key)


@dataclass(frozen=True)
class PaymentMethod:
    id: str
    name: str
    requires_reference: bool = True


@dataclass(frozen=True)
class CountryConfig:
    id: str
    currency: str
    branch_fee: float = 0.0
    payment_methods: tuple[PaymentMethod, ...] = field(default_factory=tuple)
    platform_accounts: tuple[dict, ...] = field(default_factory=tuple)

    def method(self, method_id: str) -> PaymentMethod | None:
        return next((m for m in self.payment_methods if m.id == method_id), None)


class CountryConfigPort(ABC):
    @abstractmethod
    def get(self, country: str) -> CountryConfig | None:
        """Configuration for ``country`` (any spelling), or None when unknown."""
        ...
