"""Geo API routes.

Read-only, unauthenticated endpoints for location detection, shipping quotes,
currency listing and conversion. Handlers only adapt requests to the services.
"""

import logging

import aiohttp
from fastapi import APIRouter, Depends, Query, Response

from ..core.container import Container
from ..models import CurrencyInfo
from ..services.currency import CurrencyService
from ..services.geo import GeoResolver
from ..services.shipping import ShippingService
from .dependencies import (
    get_container,
    get_currency_service,
    get_geo_resolver,
    get_http_session,
    get_request_ip,
    get_shipping_service,
    parse_amount,
)
from .schemas import (
    ConversionOut,
    CurrencyOut,
    DataEnvelope,
    LocationOut,
    ShippingRatesOut,
    ShippingZoneOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/geo", tags=["geo"])


def _set_cache_control(response: Response, container: Container) -> None:
    max_age = container.config().server.cache_max_age
    response.headers["Cache-Control"] = (
        f"public, max-age={max_age}, stale-while-revalidate={max_age * 5}"
    )


@router.get(
    "/detect",
    response_model=DataEnvelope[LocationOut],
    response_model_exclude_none=True,
)
async def detect_location(
    ip: str = Depends(get_request_ip),
    resolver: GeoResolver = Depends(get_geo_resolver),
    currency_service: CurrencyService = Depends(get_currency_service),
    session: aiohttp.ClientSession = Depends(get_http_session),
) -> DataEnvelope[LocationOut]:
    """Detect the client's location and default currency from its IP."""
    resolution = await resolver.resolve(ip, session)
    if resolution.is_default:
        logger.info(f"Location for {ip} defaulted ({resolution.source})")

    currency: CurrencyInfo = currency_service.currency_for_country(resolution.geo.country_code)
    return DataEnvelope[LocationOut](data=LocationOut.from_geo(resolution.geo, currency))


@router.get("/shipping", response_model=DataEnvelope[ShippingRatesOut])
async def get_shipping_rates(
    country_code: str | None = Query(default=None, alias="countryCode"),
    order_total: str | None = Query(default=None, alias="orderTotal"),
    shipping_service: ShippingService = Depends(get_shipping_service),
) -> DataEnvelope[ShippingRatesOut]:
    """Quote shipping for a country and order total."""
    country = country_code or "US"
    total = parse_amount(order_total)

    quote = shipping_service.calculate_shipping(country, total)
    remaining = shipping_service.amount_to_free_shipping(country, total, quote)
    rates = ShippingRatesOut.from_quote(country, quote, remaining)
    return DataEnvelope[ShippingRatesOut](data=rates)


@router.get("/shipping/zones", response_model=DataEnvelope[dict[str, ShippingZoneOut]])
async def get_all_shipping_zones(
    response: Response,
    container: Container = Depends(get_container),
    shipping_service: ShippingService = Depends(get_shipping_service),
) -> DataEnvelope[dict[str, ShippingZoneOut]]:
    """List the shipping zone table."""
    _set_cache_control(response, container)
    zones = {
        code: ShippingZoneOut.from_zone(zone) for code, zone in shipping_service.zones().items()
    }
    return DataEnvelope[dict[str, ShippingZoneOut]](data=zones)


@router.get("/currencies", response_model=DataEnvelope[list[CurrencyOut]])
async def get_currencies(
    response: Response,
    container: Container = Depends(get_container),
    currency_service: CurrencyService = Depends(get_currency_service),
) -> DataEnvelope[list[CurrencyOut]]:
    """List supported currencies."""
    _set_cache_control(response, container)
    currencies = [
        CurrencyOut.from_currency(currency) for currency in currency_service.supported_currencies()
    ]
    return DataEnvelope[list[CurrencyOut]](data=currencies)


@router.get("/convert", response_model=DataEnvelope[ConversionOut])
async def convert_currency(
    amount: str | None = Query(default=None),
    from_currency: str | None = Query(default=None, alias="from"),
    to_currency: str | None = Query(default=None, alias="to"),
    currency_service: CurrencyService = Depends(get_currency_service),
) -> DataEnvelope[ConversionOut]:
    """Convert an amount between two supported currencies."""
    conversion = currency_service.convert_between(
        parse_amount(amount),
        from_currency or "USD",
        to_currency or "USD",
    )
    return DataEnvelope[ConversionOut](data=ConversionOut.from_conversion(conversion))
