"""
Weather source provider contract.

A provider answers "temperature and humidity at this location on this
date" for one upstream. ``fetch()`` never raises for ordinary upstream
failure (timeout, HTTP error, malformed payload, missing data, open
circuit): it returns an unavailable ``ForecastSource`` instead.

Class hierarchy:
    WeatherSourceProvider      - fetch() -> ForecastSource
    └── WeatherReadingProvider - fetch_reading() -> WeatherReading,
        │                        upstream errors become unavailability
        └── HttpWeatherSource  - shared httpx client + JSON helpers
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from backend.core.domain.forecast import ForecastSource, WeatherReading
from backend.core.domain.value_objects import Humidity, Location, Temperature
from config.settings.app_config import WeatherSourceConfig


class ProviderError(RuntimeError):
    """Ordinary upstream failure."""

    retryable = True


class MalformedResponseError(ProviderError):
    """Upstream answered, but the payload could not be interpreted."""


class NoDataError(ProviderError):
    """Upstream has no data for the requested location/date."""

    retryable = False


class CircuitOpenError(ProviderError):
    """Circuit breaker rejected the call without touching the network."""

    retryable = False


UPSTREAM_ERRORS = (ProviderError, httpx.HTTPError, TimeoutError)


def is_retryable(exc: BaseException) -> bool:
    """Timeouts, connection failures, 5xx/429 and malformed payloads."""
    if isinstance(exc, ProviderError):
        return exc.retryable
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return isinstance(exc, (httpx.TransportError, TimeoutError))


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return (
            f"HTTP {exc.response.status_code} from "
            f"{exc.request.url.host}"
        )
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return f"Request timed out: {exc}" if str(exc) else "Request timed out"
    return str(exc) or exc.__class__.__name__


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class WeatherSourceProvider(ABC):
    """Anything that can produce a ``ForecastSource`` for a source name."""

    def __init__(self, source_name: str, enabled: bool = True):
        self.source_name = source_name
        self.enabled = enabled

    @abstractmethod
    async def fetch(self, location: Location, day: date) -> ForecastSource:
        """Return the forecast for ``location`` on ``day``; never raises."""

    @property
    def circuit_state(self) -> str | None:
        """Circuit breaker state, when the provider has one."""
        return None

    async def close(self) -> None:
        """Release network resources (no-op by default)."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source_name={self.source_name!r})"


class WeatherReadingProvider(WeatherSourceProvider):
    """
    Provider built on a raw ``fetch_reading()`` that may raise.

    Upstream errors are turned into unavailable sources here; anything
    else (a bug) propagates.
    """

    @abstractmethod
    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        """Query the upstream; raise an upstream error on failure."""

    async def fetch(self, location: Location, day: date) -> ForecastSource:
        try:
            reading = await self.fetch_reading(location, day)
        except UPSTREAM_ERRORS as e:
            message = describe_error(e)
            logger.warning(
                f"{self.source_name} unavailable for {location} "
                f"on {day.isoformat()}: {message}"
            )
            return ForecastSource.unavailable(self.source_name, message)

        logger.debug(
            f"{self.source_name} returned {reading.temperature} / "
            f"{reading.humidity} for {location}"
        )
        return ForecastSource.from_reading(self.source_name, reading)


class HttpWeatherSource(WeatherReadingProvider):
    """Base for vendor clients: owns one ``httpx.AsyncClient``."""

    def __init__(
        self,
        config: WeatherSourceConfig,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config.name, enabled=config.is_enabled)
        self.config = config
        self.client = client or httpx.AsyncClient(
            timeout=config.timeout_seconds + 1
        )

    async def close(self):
        """Close HTTP connection."""
        await self.client.aclose()

    async def _get_json(
        self, url: str, params: dict[str, Any] | None = None
    ) -> Any:
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{self.source_name} returned invalid JSON: {e}"
            ) from e

    def _build_reading(self, temperature: Any, humidity: Any) -> WeatherReading:
        """Validate raw upstream numbers into a reading."""
        if temperature is None or humidity is None:
            raise NoDataError(
                f"{self.source_name} response is missing "
                "temperature or humidity"
            )
        try:
            return WeatherReading(
                temperature=Temperature(celsius=temperature),
                humidity=Humidity(percent=humidity),
            )
        except ValidationError as e:
            raise MalformedResponseError(
                f"{self.source_name} returned out-of-range values: "
                f"temperature={temperature}, humidity={humidity}"
            ) from e
