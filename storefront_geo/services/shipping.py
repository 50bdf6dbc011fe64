"""Shipping cost calculation service.

Quotes shipping per destination country using flat-rate zones with a free
shipping threshold. Countries without their own zone fall back to the EU zone
(for EU members) or to the default zone, so every country can be quoted.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal

from ..config import DEFAULT_ZONE_KEY, ShippingPolicyConfig
from ..models import ShippingQuote, ShippingZone

logger = logging.getLogger(__name__)


class ShippingService:
    def __init__(self, zones: Mapping[str, ShippingZone], policy: ShippingPolicyConfig):
        self._zones = zones
        self.policy = policy

    def get_zone(self, country_code: str) -> ShippingZone:
        """Resolve the shipping zone for a country.

        Lookup order:
        - exact entry in the zone table
        - EU zone if the country is an EU member
        - default zone

        Args:
            country_code: ISO 3166-1 alpha-2 code, matched as given.

        Returns:
            The zone used for pricing. Never missing.
        """
        zone = self._zones.get(country_code)
        if zone is not None:
            return zone

        if country_code in self.policy.eu_countries:
            return self.policy.eu_zone

        logger.debug(f"No shipping zone for {country_code!r}, using default")
        return self._zones[DEFAULT_ZONE_KEY]

    def calculate_shipping(self, country_code: str, order_total: Decimal) -> ShippingQuote:
        """Quote shipping for an order.

        Shipping is free when the order total reaches the zone threshold
        (the threshold itself qualifies); otherwise the zone's flat rate applies.

        Args:
            country_code: Destination country code.
            order_total: Order subtotal in USD.

        Returns:
            ShippingQuote with cost, free shipping flag and delivery window.
        """
        zone = self.get_zone(country_code)
        is_free_shipping = order_total >= zone.free_threshold

        return ShippingQuote(
            shipping_cost=Decimal("0") if is_free_shipping else zone.rate,
            is_free_shipping=is_free_shipping,
            estimated_days=zone.estimated_days,
        )

    def amount_to_free_shipping(
        self, country_code: str, order_total: Decimal, quote: ShippingQuote
    ) -> Decimal:
        """Remaining order amount needed for free shipping.

        Only countries with their own table entry use their zone threshold;
        all others (EU members included) use the configured fallback threshold.

        Args:
            country_code: Destination country code.
            order_total: Order subtotal in USD.
            quote: Quote previously computed for the same order.

        Returns:
            Non-negative amount in USD, 0 when shipping is already free.
        """
        if quote.is_free_shipping:
            return Decimal("0")

        zone = self._zones.get(country_code)
        # A zero threshold counts as missing, same as the fallback rule.
        if zone is not None and zone.free_threshold:
            threshold = zone.free_threshold
        else:
            threshold = self.policy.free_shipping_fallback_threshold
        return max(Decimal("0"), threshold - order_total)

    def zones(self) -> Mapping[str, ShippingZone]:
        """Get the zone table, including the default zone."""
        return self._zones
