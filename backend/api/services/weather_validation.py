"""
Request validation for the weather forecast endpoint.

Responsibilities:
1. City is present and at most 100 characters
2. Country is a 2-letter uppercase ISO 3166-1 alpha-2 code
3. Date is an ISO date within today-60d .. today+7d (UTC)
4. Sources are split from a comma-separated query value
"""

import re
from datetime import date, timedelta
from typing import Any

from loguru import logger

from backend.api.services.weather_source import utc_today
from backend.core.domain.forecast import WeatherForecastRequest


class WeatherValidationService:
    """Centralised validation of forecast requests."""

    CITY_MAX_LENGTH = 100
    COUNTRY_CODE_REGEX = re.compile(r"^[A-Z]{2}$")
    MAX_FUTURE_DAYS = 7
    MAX_PAST_DAYS = 60

    @staticmethod
    def parse_date(date_str: str) -> date:
        """Parse YYYY-MM-DD."""
        try:
            return date.fromisoformat(date_str)
        except (TypeError, ValueError) as e:
            logger.bind(date_str=date_str).warning(f"Invalid date: {e}")
            raise ValueError(
                f"Invalid date '{date_str}': use YYYY-MM-DD"
            ) from e

    @staticmethod
    def parse_sources(sources: str | None) -> list[str]:
        if not sources or not sources.strip():
            return []
        return [s.strip() for s in sources.split(",") if s.strip()]

    @staticmethod
    def validate_city(city: str | None) -> list[str]:
        if not city or not city.strip():
            return ["City is required."]
        if len(city) > WeatherValidationService.CITY_MAX_LENGTH:
            return [
                "City name cannot exceed "
                f"{WeatherValidationService.CITY_MAX_LENGTH} characters."
            ]
        return []

    @staticmethod
    def validate_country(country: str | None) -> list[str]:
        if not country or not country.strip():
            return ["Country is required."]
        if not WeatherValidationService.COUNTRY_CODE_REGEX.match(country):
            return [
                "Country must be a 2-letter uppercase ISO 3166-1 alpha-2 "
                "code (e.g., 'US', 'GB')."
            ]
        return []

    @staticmethod
    def validate_date(day: date, today: date | None = None) -> list[str]:
        today = today or utc_today()
        earliest = today - timedelta(
            days=WeatherValidationService.MAX_PAST_DAYS
        )
        latest = today + timedelta(
            days=WeatherValidationService.MAX_FUTURE_DAYS
        )
        if earliest <= day <= latest:
            return []
        return [
            "Date must not be more than "
            f"{WeatherValidationService.MAX_FUTURE_DAYS} days in the future. "
            f"Past dates limit is {WeatherValidationService.MAX_PAST_DAYS} "
            "days."
        ]

    @staticmethod
    def validate_all(
        date_str: str | None,
        city: str | None,
        country: str | None,
        sources: str | None = None,
        today: date | None = None,
    ) -> tuple[bool, dict[str, Any]]:
        """
        Validate a raw forecast request.

        Returns:
            (True, {"request": WeatherForecastRequest}) when valid,
            (False, {"errors": {field: [messages]}}) otherwise
        """
        errors: dict[str, list[str]] = {}

        day: date | None = None
        if not date_str or not date_str.strip():
            errors["date"] = ["Date is required."]
        else:
            try:
                day = WeatherValidationService.parse_date(date_str)
            except ValueError as e:
                errors["date"] = [str(e)]
            else:
                date_errors = WeatherValidationService.validate_date(
                    day, today
                )
                if date_errors:
                    errors["date"] = date_errors

        city_errors = WeatherValidationService.validate_city(city)
        if city_errors:
            errors["city"] = city_errors

        country_errors = WeatherValidationService.validate_country(country)
        if country_errors:
            errors["country"] = country_errors

        if errors:
            logger.bind(city=city, country=country, date=date_str).warning(
                f"Forecast request validation failed: {errors}"
            )
            return False, {"errors": errors}

        request = WeatherForecastRequest(
            date=day,
            city=city.strip(),
            country=country,
            sources=WeatherValidationService.parse_sources(sources),
        )
        return True, {"request": request}
