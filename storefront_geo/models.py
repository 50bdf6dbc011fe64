"""Data models for the storefront geo service.

Defines Pydantic models for the reference tables (currencies, shipping zones),
the per-request geolocation result and the values computed from them. Table
models are frozen so that loaded reference data cannot be modified at runtime.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _exact_decimal(value: object) -> object:
    """Convert YAML floats through str so 0.92 stays Decimal("0.92")."""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class CurrencyInfo(BaseModel):
    """Supported currency with its exchange rate.

    Attributes:
        code: ISO 4217 currency code (e.g., 'EUR').
        symbol: Display symbol (e.g., '€').
        name: Human readable currency name.
        rate: Units of this currency per 1 USD.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    symbol: str
    name: str
    rate: Decimal = Field(gt=0)

    @field_validator("rate", mode="before")
    @classmethod
    def rate_from_float(cls, value: object) -> object:
        return _exact_decimal(value)


class ShippingZone(BaseModel):
    """Shipping pricing tier for a country.

    Attributes:
        rate: Flat shipping cost in USD when the order is not free.
        free_threshold: Order total in USD from which shipping is free.
        estimated_days: Delivery window, e.g. '3-5'.
    """

    model_config = ConfigDict(frozen=True)

    rate: Decimal = Field(ge=0)
    free_threshold: Decimal = Field(ge=0)
    estimated_days: str

    @field_validator("rate", "free_threshold", mode="before")
    @classmethod
    def amounts_from_float(cls, value: object) -> object:
        return _exact_decimal(value)


class ShippingQuote(BaseModel):
    """Shipping cost for a country and order total.

    Attributes:
        shipping_cost: Cost in USD, 0 when shipping is free.
        is_free_shipping: Whether the order total reached the free threshold.
        estimated_days: Delivery window of the resolved zone.
    """

    shipping_cost: Decimal
    is_free_shipping: bool
    estimated_days: str


class GeoInfo(BaseModel):
    """Best-effort location of a client.

    Attributes:
        country: Country name.
        country_code: ISO 3166-1 alpha-2 country code.
        currency: Currency code reported by the lookup service.
        timezone: IANA timezone name.
        city: City name, if known.
        region: Region name, if known.
    """

    model_config = ConfigDict(frozen=True)

    country: str
    country_code: str
    currency: str
    timezone: str
    city: str | None = None
    region: str | None = None


class GeoResolution(BaseModel):
    """Outcome of resolving an IP address.

    Attributes:
        geo: Location returned to callers.
        source: 'lookup' when the upstream service answered, 'local' for
            private/loopback addresses, 'fallback' when the lookup failed.
        error: Failure reason when source is 'fallback'.
    """

    geo: GeoInfo
    source: Literal["lookup", "local", "fallback"]
    error: str | None = None

    @property
    def is_default(self) -> bool:
        return self.source != "lookup"


class Conversion(BaseModel):
    """Result of converting an amount between two currencies.

    Attributes:
        original: Amount in the source currency.
        original_currency: Source currency code as requested.
        converted: Amount in the target currency, rounded to cents.
        target_currency: Target currency code as requested.
        rate: Target currency rate per USD (1 for unknown codes).
    """

    original: Decimal
    original_currency: str
    converted: Decimal
    target_currency: str
    rate: Decimal
