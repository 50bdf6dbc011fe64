"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: the loaded reference tables,
service instances built from them, a mocked aiohttp session standing in for
the IP lookup service, and an API client with the outbound session replaced.
"""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from fastapi.testclient import TestClient

from storefront_geo.api.dependencies import get_http_session
from storefront_geo.config import Config
from storefront_geo.core.container import Container
from storefront_geo.main import create_app
from storefront_geo.services.currency import CurrencyService
from storefront_geo.services.geo import GeoResolver
from storefront_geo.services.shipping import ShippingService


@pytest.fixture(scope="session")
def app_config():
    """Configuration loaded from the packaged YAML tables."""
    return Config()


@pytest.fixture
def currency_service(app_config):
    return CurrencyService(app_config.currencies, app_config.country_currencies)


@pytest.fixture
def shipping_service(app_config):
    return ShippingService(app_config.shipping_zones, app_config.shipping_policy)


@pytest.fixture
def geo_resolver(app_config):
    return GeoResolver(app_config.geo_lookup)


def make_lookup_session(payload=None, *, error=None, status=200):
    """Build a mock aiohttp session answering every GET with one response.

    Args:
        payload: JSON body returned by ``response.json()``.
        error: Exception raised by ``session.get`` instead of responding.
        status: HTTP status; values >= 400 make ``raise_for_status`` raise.
    """
    session = MagicMock(spec=aiohttp.ClientSession)

    if error is not None:
        session.get.side_effect = error
        return session

    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    if status >= 400:
        response.raise_for_status.side_effect = aiohttp.ClientResponseError(
            request_info=MagicMock(), history=(), status=status, message="upstream error"
        )

    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    return session


@pytest.fixture
def lookup_session_factory():
    return make_lookup_session


@pytest.fixture
def ip_api_success():
    """Typical ip-api.com answer for a German address."""
    return {
        "status": "success",
        "country": "Germany",
        "countryCode": "DE",
        "regionName": "Hesse",
        "city": "Frankfurt am Main",
        "timezone": "Europe/Berlin",
        "currency": "EUR",
    }


@pytest.fixture
def api_session():
    """Outbound session used by the API under test; replace per test as needed."""
    return make_lookup_session({"status": "fail", "message": "reserved range"})


@pytest.fixture
def app(api_session):
    application = create_app(Container())
    application.dependency_overrides[get_http_session] = lambda: api_session
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
