"""Geocoding: best-effort address to coordinates with a city fallback table."""

from app.infrastructure.external.geocoding.nominatim import CITY_FALLBACKS, Geocoder

__all__ = ["CITY_FALLBACKS", "Geocoder"]
