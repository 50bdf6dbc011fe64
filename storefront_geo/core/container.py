"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the application's components. Services are built from the loaded reference
tables and settings, so tests can swap in a container with their own config.
"""

from dependency_injector import containers, providers

from storefront_geo.config import Config
from storefront_geo.services.currency import CurrencyService
from storefront_geo.services.geo import GeoResolver
from storefront_geo.services.shipping import ShippingService


class Container(containers.DeclarativeContainer):
    """DI container for the application.

    This container holds the wiring for all the application's components.
    """

    config = providers.Singleton(Config)

    # Services
    currency_service = providers.Singleton(
        CurrencyService,
        currencies=config.provided.currencies,
        country_currencies=config.provided.country_currencies,
    )
    shipping_service = providers.Singleton(
        ShippingService,
        zones=config.provided.shipping_zones,
        policy=config.provided.shipping_policy,
    )
    geo_resolver = providers.Singleton(GeoResolver, lookup_config=config.provided.geo_lookup)
