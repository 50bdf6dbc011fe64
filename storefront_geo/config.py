"""Configuration management for the storefront geo service.

Handles environment-driven settings and the YAML reference tables (currencies,
country currencies, shipping zones). Tables are validated once at load time and
exposed through read-only mappings.
"""

from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .models import CurrencyInfo, ShippingZone

DEFAULT_ZONE_KEY = "default"
BASE_CURRENCY = "USD"


class ConfigError(Exception):
    """Raised when a reference table is missing or inconsistent."""


class ServerConfig(BaseSettings):
    """HTTP server configuration.

    Attributes:
        host: Interface to bind.
        port: Port to listen on.
        log_level: Root logging level name.
        cors_origins: Origins allowed by CORS.
        cache_max_age: Cache-Control max-age in seconds for static listings.
    """
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=4000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_origins: list[str] = Field(default=["*"], validation_alias="CORS_ORIGINS")
    cache_max_age: int = Field(default=300, validation_alias="CACHE_MAX_AGE")


class GeoLookupConfig(BaseSettings):
    """IP geolocation service settings.

    Attributes:
        base_url: Lookup endpoint; the IP is appended as a path segment.
        timeout: Total request timeout in seconds.
        fields: Fields requested from the lookup service.
    """
    base_url: str = Field(default="http://ip-api.com/json", validation_alias="GEO_LOOKUP_URL")
    timeout: float = Field(default=5.0, validation_alias="GEO_LOOKUP_TIMEOUT")
    fields: str = "status,country,countryCode,city,regionName,timezone,currency"


class ShippingPolicyConfig(BaseSettings):
    """Regional shipping fallback rules.

    Attributes:
        eu_zone: Zone applied to EU members without their own table entry.
        eu_countries: EU member country codes.
        free_shipping_fallback_threshold: Threshold used for the remaining
            amount hint when a country has no own table entry.
    """
    eu_zone: ShippingZone = ShippingZone(
        rate=Decimal("14.99"), free_threshold=Decimal("100"), estimated_days="7-10"
    )
    eu_countries: frozenset[str] = frozenset()
    free_shipping_fallback_threshold: Decimal = Decimal("150")


class Config:
    """Application configuration manager.

    Loads environment settings and the reference tables from the YAML files
    in the configuration directory.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to
                storefront_geo/config.

        Raises:
            ConfigError: If a reference table is missing or violates its
                invariants.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.server = ServerConfig()
        self.geo_lookup = GeoLookupConfig()

        self.currencies = self._load_currencies()
        self.country_currencies = self._load_country_currencies()

        zones_data = self._read_yaml("shipping_zones.yml")
        self.shipping_zones = self._load_shipping_zones(zones_data)
        self.shipping_policy = self._load_shipping_policy(zones_data)

    def _read_yaml(self, name: str) -> dict[str, Any]:
        path = self.config_dir / name
        if not path.exists():
            raise ConfigError(f"Missing reference table: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ConfigError(f"Reference table {path} must be a mapping")
        return data

    def _load_currencies(self) -> Mapping[str, CurrencyInfo]:
        """Load the currency table keyed by code.

        Returns:
            Read-only mapping preserving file order.
        """
        entries = self._read_yaml("currencies.yml").get("currencies") or []
        currencies: dict[str, CurrencyInfo] = {}
        for entry in entries:
            try:
                currency = CurrencyInfo(**entry)
            except (TypeError, ValidationError) as e:
                raise ConfigError(f"Invalid currency entry {entry!r}: {e}") from e
            if currency.code in currencies:
                raise ConfigError(f"Duplicate currency code: {currency.code}")
            currencies[currency.code] = currency

        base = currencies.get(BASE_CURRENCY)
        if base is None:
            raise ConfigError(f"Currency table must contain {BASE_CURRENCY}")
        if base.rate != 1:
            raise ConfigError(f"{BASE_CURRENCY} rate must be exactly 1, got {base.rate}")

        return MappingProxyType(currencies)

    def _load_country_currencies(self) -> Mapping[str, str]:
        countries = self._read_yaml("country_currencies.yml").get("countries") or {}
        mapping: dict[str, str] = {}
        for country_code, currency_code in countries.items():
            if not isinstance(country_code, str):
                raise ConfigError(
                    f"Country code {country_code!r} is not a string; quote it in YAML"
                )
            if currency_code not in self.currencies:
                raise ConfigError(
                    f"Country {country_code} maps to unknown currency {currency_code}"
                )
            mapping[country_code] = currency_code
        return MappingProxyType(mapping)

    def _load_shipping_zones(self, data: dict[str, Any]) -> Mapping[str, ShippingZone]:
        zones: dict[str, ShippingZone] = {}
        for key, entry in (data.get("zones") or {}).items():
            if not isinstance(key, str):
                raise ConfigError(f"Zone key {key!r} is not a string; quote it in YAML")
            try:
                zones[key] = ShippingZone(**entry)
            except (TypeError, ValidationError) as e:
                raise ConfigError(f"Invalid shipping zone {key}: {e}") from e

        if DEFAULT_ZONE_KEY not in zones:
            raise ConfigError(f"Shipping zone table must contain '{DEFAULT_ZONE_KEY}'")

        return MappingProxyType(zones)

    def _load_shipping_policy(self, data: dict[str, Any]) -> ShippingPolicyConfig:
        overrides: dict[str, Any] = {}
        if "eu_zone" in data:
            overrides["eu_zone"] = data["eu_zone"]
        if "eu_countries" in data:
            overrides["eu_countries"] = frozenset(data["eu_countries"] or [])
        if "free_shipping_fallback_threshold" in data:
            overrides["free_shipping_fallback_threshold"] = Decimal(
                str(data["free_shipping_fallback_threshold"])
            )

        try:
            return ShippingPolicyConfig(**overrides)
        except ValidationError as e:
            raise ConfigError(f"Invalid shipping policy: {e}") from e

