"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from redmaple.config import Settings, parse_duration


class TestExportInterval:
    """EXPORT_INTERVAL accepts seconds or Go-style durations."""

    @pytest.mark.parametrize(
        ("raw", "seconds"),
        [("1m", 60.0), ("30s", 30.0), ("1h30m", 5400.0), ("1.5h", 5400.0), ("250ms", 0.25), ("45", 45.0)],
    )
    def test_env_values(self, monkeypatch: pytest.MonkeyPatch, raw: str, seconds: float) -> None:
        monkeypatch.setenv("EXPORT_INTERVAL", raw)

        assert Settings(_env_file=None).export_interval_sec == seconds

    def test_default_is_one_minute(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EXPORT_INTERVAL", raising=False)
        monkeypatch.delenv("EXPORT_INTERVAL_SEC", raising=False)

        assert Settings(_env_file=None).export_interval_sec == 60.0

    @pytest.mark.parametrize("raw", ["soon", "5 minutes", "10d", "0s"])
    def test_invalid_values_rejected(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("EXPORT_INTERVAL", raw)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestParseDuration:
    """Unit tests for parse_duration."""

    def test_units(self) -> None:
        assert parse_duration("2h") == 7200.0
        assert parse_duration("1m1s") == 61.0
        assert parse_duration("500us") == pytest.approx(0.0005)

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_duration("1x")


class TestSettingsHelpers:
    """Derived settings helpers."""

    def test_weather_coordinates(self) -> None:
        settings = Settings(_env_file=None, weather_location="40.7, -73.9")

        assert settings.weather_coordinates == (40.7, -73.9)

    def test_lists_are_trimmed(self) -> None:
        settings = Settings(_env_file=None, subway_stops=" L03S , ,G29N", citibike_stations="A St")

        assert settings.subway_stop_ids == ["L03S", "G29N"]
        assert settings.citibike_station_names == ["A St"]
