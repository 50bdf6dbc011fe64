"""FastAPI dependencies resolving services from the application container."""

import math
from decimal import Decimal, InvalidOperation

import aiohttp
from fastapi import Depends, Request

from ..core.container import Container
from ..services.currency import CurrencyService
from ..services.geo import GeoResolver, get_client_ip
from ..services.shipping import ShippingService
from .errors import ApiError


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_currency_service(container: Container = Depends(get_container)) -> CurrencyService:
    return container.currency_service()


def get_shipping_service(container: Container = Depends(get_container)) -> ShippingService:
    return container.shipping_service()


def get_geo_resolver(container: Container = Depends(get_container)) -> GeoResolver:
    return container.geo_resolver()


def get_http_session(request: Request) -> aiohttp.ClientSession:
    """Shared outbound session opened by the application lifespan."""
    session = getattr(request.app.state, "http_session", None)
    if session is None or session.closed:
        raise ApiError("Geo lookup unavailable", status_code=503)
    return session


def get_request_ip(request: Request) -> str:
    client_host = request.client.host if request.client else None
    return get_client_ip(request.headers, client_host)


def parse_amount(raw: str | None) -> Decimal:
    """Parse a numeric query parameter leniently.

    Missing, unparseable or non-finite values become 0 instead of an error.
    Values beyond the double range count as non-finite, and underscore digit
    grouping is not accepted.
    """
    if not raw or "_" in raw:
        return Decimal("0")
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite() or not math.isfinite(float(value)):
        return Decimal("0")
    return value
