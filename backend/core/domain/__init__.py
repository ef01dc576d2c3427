from backend.core.domain.forecast import (
    AggregatedForecast,
    AggregationOutcome,
    ForecastSource,
    WeatherForecastRequest,
    WeatherForecastResponse,
    WeatherReading,
)
from backend.core.domain.value_objects import Humidity, Location, Temperature

__all__ = [
    "AggregatedForecast",
    "AggregationOutcome",
    "ForecastSource",
    "Humidity",
    "Location",
    "Temperature",
    "WeatherForecastRequest",
    "WeatherForecastResponse",
    "WeatherReading",
]
