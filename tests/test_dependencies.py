"""Tests for service wiring."""

from pathlib import Path

import pytest

from redmaple.config import Settings
from redmaple.dependencies import build_hub, build_services
from redmaple.errors import ConfigurationError
from redmaple.export import ExportHub
from redmaple.services.citibike import CitibikeClient
from redmaple.services.homeassistant import HomeAssistantClient
from redmaple.services.weather import WeatherClient

from .fixtures.gtfs_rt_fixture import STOPS_TXT


def _hub_for(settings: Settings) -> ExportHub:
    return build_hub(
        settings,
        WeatherClient(40.75, -73.98, settings.weather_api_key),
        CitibikeClient(),
        HomeAssistantClient(settings.ha_endpoint, settings.ha_api_key),
    )


class TestBuildHub:
    """Provider and exporter registration driven by settings."""

    @pytest.mark.asyncio
    async def test_minimal_settings_register_only_bike_stations(self) -> None:
        settings = Settings(
            _env_file=None,
            citibike_stations="A St,B St",
            weather_api_key="",
            ha_indoor_temp_id="",
            ha_indoor_humidity_id="",
            ha_outdoor_temp_id="",
            ha_outdoor_humidity_id="",
            influxdb_enabled=False,
            debug=False,
        )

        status = await _hub_for(settings).get_status()

        assert status["providers"] == ["citibike:A St", "citibike:B St"]
        assert status["exporters"] == []

    @pytest.mark.asyncio
    async def test_full_settings(self) -> None:
        settings = Settings(
            _env_file=None,
            citibike_stations="A St",
            weather_api_key="key",
            ha_outdoor_temp_id="sensor.outdoor_temperature",
            influxdb_enabled=True,
            influxdb_endpoint="http://influx:8181",
            influxdb_database="redmaple",
            debug=True,
            export_interval_sec=15,
        )

        status = await _hub_for(settings).get_status()

        assert status["providers"] == ["home-assistant", "citibike:A St", "weather"]
        assert status["exporters"] == ["InfluxDBExporter", "LogExporter"]
        assert status["interval_sec"] == 15


class TestBuildServices:
    """Tests for build_services."""

    def test_loads_stop_directory(self, tmp_path: Path) -> None:
        (tmp_path / "mta").mkdir()
        (tmp_path / "mta" / "stops.txt").write_text(STOPS_TXT)
        settings = Settings(_env_file=None, data_dir=tmp_path, subway_stops="L03S")

        services = build_services(settings)

        assert services.subway.directory.get("L03S").name == "14 St-Union Sq"
        assert services.settings is settings

    def test_missing_stop_directory_is_fatal(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, data_dir=tmp_path)

        with pytest.raises(ConfigurationError):
            build_services(settings)

    def test_malformed_weather_location(self, tmp_path: Path) -> None:
        (tmp_path / "mta").mkdir()
        (tmp_path / "mta" / "stops.txt").write_text(STOPS_TXT)
        settings = Settings(_env_file=None, data_dir=tmp_path, weather_location="40.7")

        with pytest.raises(ValueError):
            build_services(settings)
