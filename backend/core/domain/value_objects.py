"""
Self-validating weather quantities.

All three are frozen pydantic models: construction either yields a valid
value or raises ``pydantic.ValidationError`` (a ``ValueError``).
Quantities are ``Decimal`` and serialise to plain JSON numbers.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    computed_field,
    field_validator,
)

COUNTRY_CODE_PATTERN = r"^[A-Z]{2}$"

MIN_CELSIUS = Decimal("-100")
MAX_CELSIUS = Decimal("60")

ONE_PLACE = Decimal("0.1")

# Decimal in Python, plain number in JSON
DecimalValue = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


def round_one_place(value: Decimal) -> Decimal:
    """Round half away from zero to one decimal place."""
    return value.quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


class Location(BaseModel):
    """City plus ISO 3166-1 alpha-2 country code."""

    model_config = ConfigDict(frozen=True)

    city: str = Field(..., description="City name (trimmed, non-blank)")
    country: str = Field(
        ...,
        pattern=COUNTRY_CODE_PATTERN,
        description="Two-letter uppercase country code",
    )

    @field_validator("city")
    @classmethod
    def _strip_city(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("City cannot be empty")
        return value

    def __str__(self) -> str:
        return f"{self.city}, {self.country}"


class Temperature(BaseModel):
    model_config = ConfigDict(frozen=True)

    celsius: DecimalValue = Field(
        ...,
        ge=MIN_CELSIUS,
        le=MAX_CELSIUS,
        allow_inf_nan=False,
        description="Temperature (°C)",
    )

    @computed_field
    @property
    def fahrenheit(self) -> DecimalValue:
        return self.celsius * 9 / 5 + 32

    def __str__(self) -> str:
        return f"{self.celsius}°C"


class Humidity(BaseModel):
    model_config = ConfigDict(frozen=True)

    percent: DecimalValue = Field(
        ...,
        ge=Decimal("0"),
        le=Decimal("100"),
        allow_inf_nan=False,
        description="Relative humidity (%)",
    )

    def __str__(self) -> str:
        return f"{self.percent}%"
