"""Response schemas for the geo API.

All responses wrap their payload in a ``{"data": ...}`` envelope and use
camelCase field names. Amounts are serialized as JSON numbers.
"""

import math
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models import Conversion, CurrencyInfo, GeoInfo, ShippingQuote, ShippingZone

T = TypeVar("T")


def _json_number(value: Decimal) -> float | None:
    """Amount as a JSON number, or None when it overflows a double."""
    number = float(value)
    return number if math.isfinite(number) else None


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataEnvelope(BaseModel, Generic[T]):
    data: T


class LocationOut(ApiModel):
    """Detected location with the country's default currency."""

    country: str
    country_code: str
    currency: str
    timezone: str
    city: str | None = None
    region: str | None = None
    currency_symbol: str
    currency_name: str

    @classmethod
    def from_geo(cls, geo: GeoInfo, currency: CurrencyInfo) -> "LocationOut":
        return cls(
            country=geo.country,
            country_code=geo.country_code,
            currency=currency.code,
            timezone=geo.timezone,
            city=geo.city,
            region=geo.region,
            currency_symbol=currency.symbol,
            currency_name=currency.name,
        )


class ShippingRatesOut(ApiModel):
    country_code: str
    shipping_cost: float
    is_free_shipping: bool
    estimated_days: str
    amount_to_free_shipping: float

    @classmethod
    def from_quote(
        cls, country_code: str, quote: ShippingQuote, amount_to_free_shipping: Decimal
    ) -> "ShippingRatesOut":
        return cls(
            country_code=country_code,
            shipping_cost=float(quote.shipping_cost),
            is_free_shipping=quote.is_free_shipping,
            estimated_days=quote.estimated_days,
            amount_to_free_shipping=float(amount_to_free_shipping),
        )


class ShippingZoneOut(ApiModel):
    rate: float
    free_threshold: float
    estimated_days: str

    @classmethod
    def from_zone(cls, zone: ShippingZone) -> "ShippingZoneOut":
        return cls(
            rate=float(zone.rate),
            free_threshold=float(zone.free_threshold),
            estimated_days=zone.estimated_days,
        )


class CurrencyOut(ApiModel):
    code: str
    symbol: str
    name: str
    rate: float

    @classmethod
    def from_currency(cls, currency: CurrencyInfo) -> "CurrencyOut":
        return cls(
            code=currency.code,
            symbol=currency.symbol,
            name=currency.name,
            rate=float(currency.rate),
        )


class ConversionOut(ApiModel):
    original: float
    original_currency: str
    converted: float | None
    target_currency: str
    rate: float

    @classmethod
    def from_conversion(cls, conversion: Conversion) -> "ConversionOut":
        return cls(
            original=float(conversion.original),
            original_currency=conversion.original_currency,
            converted=_json_number(conversion.converted),
            target_currency=conversion.target_currency,
            rate=float(conversion.rate),
        )
