"""In-memory country configuration used until an external source is wired in."""

from marketplace.countries.port import CountryConfig, CountryConfigPort, normalize_country


class InMemoryCountryConfig(CountryConfigPort):
    def __init__(self, configs: list[CountryConfig] | None = None):
        self._configs: dict[str, CountryConfig] = {}
        for config in configs or []:
            self.register(config)

    def register(self, config: CountryConfig) -> None:
        self._configs[normalize_country(config.id)] = config

    def get(self, country: str) -> CountryConfig | None:
        return self._configs.get(normalize_country(country))

    def reset(self):
        self._configs.clear()
