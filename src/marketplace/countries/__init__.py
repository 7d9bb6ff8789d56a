"""Country configuration registry."""

from marketplace.countries.port import (
    CASH_ON_DELIVERY,
    CountryConfig,
    CountryConfigPort,
    PaymentMethod,
    normalize_country,
)

_country_config: CountryConfigPort | None = None


def get_country_config() -> CountryConfigPort:
    global _country_config
    if _country_config is None:
        from marketplace.countries.memory_adapter import InMemoryCountryConfig

        _country_config = InMemoryCountryConfig()
    return _country_config


def set_country_config(source: CountryConfigPort) -> None:
    global _country_config
    _country_config = source


def reset_country_config():
    global _country_config
    _country_config = None


__all__ = [
    "CASH_ON_DELIVERY",
    "CountryConfig",
    "CountryConfigPort",
    "PaymentMethod",
    "get_country_config",
    "normalize_country",
    "reset_country_config",
    "set_country_config",
]
