"""IP geolocation service.

Resolves a client IP address to a best-effort country, currency and timezone
using an external IP lookup service (ip-api.com by default). Resolution never
fails: loopback/private addresses and failed lookups resolve to US defaults.
The lookup itself raises GeoLookupError so callers can tell real results from
defaults.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..config import GeoLookupConfig
from ..models import GeoInfo, GeoResolution

logger = logging.getLogger(__name__)

US_DEFAULT_GEO = GeoInfo(
    country="United States",
    country_code="US",
    currency="USD",
    timezone="America/New_York",
)

LOCAL_ADDRESSES = frozenset({"127.0.0.1", "::1"})
LOCAL_PREFIXES = ("192.168.", "10.")
FALLBACK_CLIENT_IP = "127.0.0.1"


class GeoLookupError(Exception):
    """Raised when the IP lookup service gives no usable answer."""


def is_local_address(ip: str) -> bool:
    """Check whether an address is loopback or in a private range we skip."""
    return ip in LOCAL_ADDRESSES or ip.startswith(LOCAL_PREFIXES)


def get_client_ip(headers: Mapping[str, str], client_host: str | None = None) -> str:
    """Extract the client IP address from request metadata.

    Order: first entry of X-Forwarded-For, X-Real-IP, the peer address,
    then 127.0.0.1.

    Args:
        headers: Request headers (case-insensitive mapping expected).
        client_host: Peer address reported by the server, if any.

    Returns:
        Best-effort client IP. Not validated.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return client_host or FALLBACK_CLIENT_IP


class GeoResolver:
    """Resolve client IP addresses through the IP lookup service."""

    def __init__(self, lookup_config: GeoLookupConfig):
        self.lookup_config = lookup_config

    async def lookup(self, ip: str, session: aiohttp.ClientSession) -> GeoInfo:
        """Look up an IP address with a single request, no retry.

        Args:
            ip: Client IP address.
            session: HTTP session for the request.

        Returns:
            GeoInfo built from the response, with defaults for missing fields.

        Raises:
            GeoLookupError: On network errors, timeouts, non-2xx responses,
                unparseable bodies or a 'fail' status.
        """
        url = f"{self.lookup_config.base_url.rstrip('/')}/{ip}"
        timeout = aiohttp.ClientTimeout(total=self.lookup_config.timeout)

        try:
            async with session.get(
                url, params={"fields": self.lookup_config.fields}, timeout=timeout
            ) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise GeoLookupError(f"Lookup request for {ip} failed: {e!r}") from e

        if not isinstance(data, dict):
            raise GeoLookupError(f"Unexpected lookup response for {ip}: {data!r}")

        if data.get("status") == "fail":
            raise GeoLookupError(f"Lookup service rejected {ip}: {data.get('message', 'fail')}")

        try:
            return self._parse_response(data)
        except ValidationError as e:
            raise GeoLookupError(f"Malformed lookup response for {ip}: {e}") from e

    def _parse_response(self, data: dict[str, Any]) -> GeoInfo:
        """Map lookup service fields onto GeoInfo."""
        return GeoInfo(
            country=data.get("country") or "Unknown",
            country_code=data.get("countryCode") or "US",
            currency=data.get("currency") or "USD",
            timezone=data.get("timezone") or "UTC",
            city=data.get("city"),
            region=data.get("regionName"),
        )

    async def resolve(self, ip: str, session: aiohttp.ClientSession) -> GeoResolution:
        """Resolve an IP address, falling back to US defaults.

        Loopback and private addresses skip the network call. A failed lookup
        is logged and replaced by the US default.

        Args:
            ip: Client IP address.
            session: HTTP session for the lookup.

        Returns:
            GeoResolution recording where the location came from.
        """
        if is_local_address(ip):
            logger.debug(f"Local address {ip}, using US defaults")
            return GeoResolution(geo=US_DEFAULT_GEO, source="local")

        try:
            geo = await self.lookup(ip, session)
        except GeoLookupError as e:
            logger.warning(f"Geo lookup failed, using US defaults: {e}")
            return GeoResolution(geo=US_DEFAULT_GEO, source="fallback", error=str(e))

        logger.debug(f"Resolved {ip} to {geo.country_code}")
        return GeoResolution(geo=geo, source="lookup")

    async def get_geo_from_ip(self, ip: str, session: aiohttp.ClientSession) -> GeoInfo:
        """Resolve an IP address to a location, never raising."""
        resolution = await self.resolve(ip, session)
        return resolution.geo
