"""
Coordinate resolution via the Open-Meteo Geocoding API.

Free, no API key. https://open-meteo.com/en/docs/geocoding-api

Resolved coordinates are memoised per (city, country) in a bounded LRU
cache, since a city does not move between requests.
"""

import httpx
from cachetools import LRUCache
from loguru import logger
from pydantic import BaseModel

from backend.api.services.weather_source import (
    MalformedResponseError,
    NoDataError,
)
from backend.core.domain.value_objects import Location


class GeocodingConfig(BaseModel):
    """Open-Meteo Geocoding API configuration."""

    base_url: str = "https://geocoding-api.open-meteo.com"
    timeout: float = 5.0
    language: str = "en"
    cache_size: int = 1024


class GeocodingClient:
    """Resolve a ``Location`` to (latitude, longitude)."""

    def __init__(
        self,
        config: GeocodingConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or GeocodingConfig()
        self.client = client or httpx.AsyncClient(timeout=self.config.timeout)
        self._resolved: LRUCache = LRUCache(maxsize=self.config.cache_size)

    async def close(self):
        """Close HTTP connection."""
        await self.client.aclose()

    async def resolve_coordinates(
        self, location: Location
    ) -> tuple[float, float]:
        """
        Resolve a city to coordinates.

        Raises:
            NoDataError: No place matches the city/country
            MalformedResponseError: Unexpected payload shape
            httpx.HTTPError: Transport or HTTP status failure
        """
        key = (location.city.lower(), location.country)
        if key in self._resolved:
            return self._resolved[key]

        params = {
            "name": location.city,
            "count": 1,
            "language": self.config.language,
            "format": "json",
            "countryCode": location.country,
        }
        response = await self.client.get(
            f"{self.config.base_url}/v1/search", params=params
        )
        response.raise_for_status()

        try:
            results = response.json().get("results") or []
        except (ValueError, AttributeError) as e:
            raise MalformedResponseError(
                f"Geocoding returned invalid payload: {e}"
            ) from e

        if not results:
            raise NoDataError(f"No coordinates found for {location}")

        try:
            coordinates = (
                float(results[0]["latitude"]),
                float(results[0]["longitude"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Geocoding result for {location} has no coordinates"
            ) from e

        logger.debug(f"Geocoded {location} -> {coordinates}")
        self._resolved[key] = coordinates
        return coordinates
