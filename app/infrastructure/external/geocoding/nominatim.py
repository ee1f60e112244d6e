"""Address geocoding against a Nominatim-style search endpoint.

One GET per address, no retry. When the call fails or finds nothing the
address is matched against a static table of city centres.
"""

from __future__ import annotations

import httpx

from app.domain.exceptions import UpstreamFailureException
from app.domain.value_objects import Coordinates
from app.infrastructure.external.http import request
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

CITY_FALLBACKS: dict[str, Coordinates] = {
    "AUCKLAND": Coordinates(lat=-36.8485, lng=174.7633),
    "WELLINGTON": Coordinates(lat=-41.2865, lng=174.7762),
    "HAMILTON": Coordinates(lat=-37.7870, lng=175.2793),
    "CHRISTCHURCH": Coordinates(lat=-43.5321, lng=172.6362),
}


def city_fallback(address: str) -> Coordinates | None:
    """Return the first city whose name appears in address (case-insensitive)."""
    upper = address.upper()
    for city, coords in CITY_FALLBACKS.items():
        if city in upper:
            return coords
    return None


class Geocoder:
    """Resolves addresses to coordinates."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "GDC-Properties/1.0",
        country: str = "New Zealand",
        country_codes: str = "nz",
    ) -> None:
        self._client = http_client
        self.url = url
        self.user_agent = user_agent
        self.country = country
        self.country_codes = country_codes

    async def lookup(self, address: str) -> Coordinates | None:
        """Query the geocoding endpoint once. Returns None on failure or no match."""
        clean = ", ".join(part.strip() for part in address.split(",") if part.strip())
        if not clean:
            return None
        query = f"{clean}, {self.country}" if self.country else clean
        try:
            response = await request(
                self._client,
                "geocoding",
                "GET",
                self.url,
                params={
                    "format": "json",
                    "q": query,
                    "limit": "1",
                    "countrycodes": self.country_codes,
                },
                headers={"User-Agent": self.user_agent},
            )
        except UpstreamFailureException as exc:
            logger.warning("Geocoding failed for %r: %s", address, exc.message)
            return None
        try:
            results = response.json()
        except ValueError:
            logger.warning("Geocoding returned non-JSON for %r", address)
            return None
        if not results:
            return None
        try:
            return Coordinates(lat=float(results[0]["lat"]), lng=float(results[0]["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Geocoding result unusable for %r: %s", address, exc)
            return None

    async def geocode(self, address: str | None) -> Coordinates | None:
        """Best-effort coordinates: live lookup first, then the city table."""
        if not address or not address.strip():
            return None
        coords = await self.lookup(address)
        if coords is None:
            coords = city_fallback(address)
            if coords is not None:
                logger.info("Using city fallback coordinates for %r", address)
        return coords
