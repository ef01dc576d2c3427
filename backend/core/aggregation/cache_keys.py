"""
Deterministic cache keys.

Provider slots:
    weather:{source}:{city}:{country}:{yyyymmdd}
    weather:stale:{source}:{city}:{country}:{yyyymmdd}
Aggregated responses:
    weather:{city}:{country}:{yyyymmdd}:{source-a-source-b | all}
"""

from collections.abc import Iterable
from datetime import date

from backend.core.domain.value_objects import Location

KEY_PREFIX = "weather"
STALE_SEGMENT = "stale"
ALL_SOURCES = "all"


def _date_segment(day: date) -> str:
    return day.strftime("%Y%m%d")


def provider_cache_key(source_name: str, location: Location, day: date) -> str:
    return (
        f"{KEY_PREFIX}:{source_name}:{location.city.lower()}:"
        f"{location.country.lower()}:{_date_segment(day)}"
    )


def provider_stale_key(source_name: str, location: Location, day: date) -> str:
    return (
        f"{KEY_PREFIX}:{STALE_SEGMENT}:{source_name}:"
        f"{location.city.lower()}:{location.country.lower()}:"
        f"{_date_segment(day)}"
    )


def response_cache_key(
    city: str, country: str, day: date, sources: Iterable[str] | None = None
) -> str:
    """Key for a whole aggregated response; source order does not matter."""
    names = sorted(s.strip().lower() for s in (sources or ()) if s.strip())
    source_segment = "-".join(names) if names else ALL_SOURCES
    return (
        f"{KEY_PREFIX}:{city.strip().lower()}:{country.strip().lower()}:"
        f"{_date_segment(day)}:{source_segment}"
    )
