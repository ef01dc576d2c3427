"""
Tests for Location, Temperature and Humidity.
"""

import pytest
from pydantic import ValidationError

from backend.core.domain.value_objects import Humidity, Location, Temperature


class TestTemperature:
    """Range validation and conversions."""

    @pytest.mark.parametrize("celsius", [-100.0, -40.5, 0.0, 20.0, 60.0])
    def test_valid_values(self, celsius):
        assert Temperature(celsius=celsius).celsius == celsius

    @pytest.mark.parametrize("celsius", [-100.1, 60.1, 1000.0])
    def test_out_of_range_rejected(self, celsius):
        with pytest.raises(ValidationError):
            Temperature(celsius=celsius)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            Temperature(celsius=float("nan"))

    def test_fahrenheit(self):
        assert Temperature(celsius=0).fahrenheit == 32
        assert Temperature(celsius=50).fahrenheit == 122
        assert Temperature(celsius=-40).fahrenheit == -40

    def test_str(self):
        assert str(Temperature(celsius=20.5)) == "20.5°C"

    def test_immutable(self):
        temperature = Temperature(celsius=10)
        with pytest.raises(ValidationError):
            temperature.celsius = 11

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Temperature(celsius=61)


class TestHumidity:
    @pytest.mark.parametrize("percent", [0.0, 55.5, 100.0])
    def test_valid_values(self, percent):
        assert Humidity(percent=percent).percent == percent

    @pytest.mark.parametrize("percent", [-0.1, 100.1])
    def test_out_of_range_rejected(self, percent):
        with pytest.raises(ValidationError):
            Humidity(percent=percent)

    def test_str(self):
        assert str(Humidity(percent=60.0)) == "60.0%"


class TestLocation:
    def test_city_is_trimmed(self):
        location = Location(city="  London ", country="GB")
        assert location.city == "London"

    def test_str(self):
        assert str(Location(city="London", country="GB")) == "London, GB"

    @pytest.mark.parametrize("city", ["", "   "])
    def test_blank_city_rejected(self, city):
        with pytest.raises(ValidationError):
            Location(city=city, country="GB")

    @pytest.mark.parametrize("country", ["gb", "GBR", "G", "", "1A"])
    def test_invalid_country_rejected(self, country):
        with pytest.raises(ValidationError):
            Location(city="London", country=country)

    def test_equality(self):
        assert Location(city="Paris", country="FR") == Location(
            city=" Paris", country="FR"
        )
