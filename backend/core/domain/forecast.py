"""
Forecast result models shared by providers, cache and aggregation.
"""

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from backend.core.domain.value_objects import (
    DecimalValue,
    Humidity,
    Temperature,
    round_one_place,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherReading(BaseModel):
    """Raw temperature/humidity pair produced by an upstream source."""

    model_config = ConfigDict(frozen=True)

    temperature: Temperature
    humidity: Humidity


class ForecastSource(BaseModel):
    """
    Outcome of querying one source for one (location, date).

    Either available with a reading, or unavailable with an error message;
    never both. Instances are immutable.
    """

    model_config = ConfigDict(frozen=True)

    source_name: str = Field(..., min_length=1)
    temperature: Temperature | None = None
    humidity: Humidity | None = None
    available: bool
    error: str | None = None
    retrieved_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_availability(self) -> "ForecastSource":
        if not self.available and (
            self.temperature is not None or self.humidity is not None
        ):
            raise ValueError("Unavailable source cannot carry readings")
        if self.available and self.error is not None:
            raise ValueError("Available source cannot carry an error")
        return self

    @classmethod
    def from_reading(
        cls, source_name: str, reading: WeatherReading
    ) -> "ForecastSource":
        return cls(
            source_name=source_name,
            temperature=reading.temperature,
            humidity=reading.humidity,
            available=True,
        )

    @classmethod
    def unavailable(cls, source_name: str, error: str) -> "ForecastSource":
        return cls(source_name=source_name, available=False, error=error)

    @property
    def has_reading(self) -> bool:
        return (
            self.available
            and self.temperature is not None
            and self.humidity is not None
        )


class AggregatedForecast(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_temperature: DecimalValue | None = Field(
        None, description="Mean temperature (°C), one decimal"
    )
    avg_humidity: DecimalValue | None = Field(
        None, description="Mean relative humidity (%), one decimal"
    )
    temperature_range: str | None = None
    humidity_range: str | None = None

    @computed_field
    @property
    def avg_temperature_fahrenheit(self) -> DecimalValue | None:
        if self.avg_temperature is None:
            return None
        return round_one_place(self.avg_temperature * 9 / 5 + 32)


class WeatherForecastRequest(BaseModel):
    """Validated aggregation request (see ``weather_validation``)."""

    date: date
    city: str
    country: str
    sources: list[str] = Field(default_factory=list)


class AggregationOutcome(str, Enum):
    OK = "ok"
    PARTIAL = "partial"
    NO_MATCHING_PROVIDERS = "no_matching_providers"
    ALL_SOURCES_UNAVAILABLE = "all_sources_unavailable"


class WeatherForecastResponse(BaseModel):
    location: str
    date: date
    aggregated_forecast: AggregatedForecast | None = None
    sources: list[ForecastSource] = Field(default_factory=list)

    @property
    def available_count(self) -> int:
        return sum(1 for source in self.sources if source.available)

    @property
    def outcome(self) -> AggregationOutcome:
        if not self.sources:
            return AggregationOutcome.NO_MATCHING_PROVIDERS
        available = self.available_count
        if available == 0:
            return AggregationOutcome.ALL_SOURCES_UNAVAILABLE
        if available < len(self.sources):
            return AggregationOutcome.PARTIAL
        return AggregationOutcome.OK
