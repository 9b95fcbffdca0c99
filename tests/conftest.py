"""Pytest configuration and fixtures."""

import time
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from redmaple.config import Settings
from redmaple.dependencies import Services, build_hub, get_services
from redmaple.main import app
from redmaple.services.citibike import CitibikeClient
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.homeassistant import HomeAssistantClient
from redmaple.services.subway import SubwayClient
from redmaple.services.weather import WeatherClient

from .fixtures.gtfs_rt_fixture import build_directory, build_feed
from .fixtures.source_payloads import (
    device_state_payload,
    pollution_payload,
    station_information_payload,
    station_status_payload,
    vehicle_types_payload,
    weather_payload,
)

INDOOR_TEMP_ID = "sensor.living_room_temperature"
INDOOR_HUMIDITY_ID = "sensor.living_room_humidity"


@pytest.fixture
def settings() -> Settings:
    """Settings with one stop, one bike station and indoor sensors only."""
    return Settings(
        _env_file=None,
        subway_stops="L03S",
        citibike_stations="Park Ave & E 42 St",
        weather_api_key="key",
        ha_api_key="token",
        ha_indoor_temp_id=INDOOR_TEMP_ID,
        ha_indoor_humidity_id=INDOOR_HUMIDITY_ID,
        ha_outdoor_temp_id="",
        ha_outdoor_humidity_id="",
        export_auto_start=False,
        influxdb_enabled=False,
        debug=False,
    )


@pytest.fixture
def subway_feed() -> bytes:
    """L feed with two southbound trips through 14 St-Union Sq in the future."""
    now = int(time.time())
    return build_feed(
        trips=[
            {"trip_id": "late", "stop_times": [("L01S", now + 300), ("L03S", now + 630)]},
            {"trip_id": "soon", "stop_times": [("L01S", now + 60), ("L03S", now + 330)]},
        ],
        vehicles=[{"vehicle_id": "v1", "stop_id": "L02S", "stopped": True}],
        alerts=[{"alert_id": "a1", "header": "Weekend work"}],
    )


@pytest.fixture
def mock_fetcher(subway_feed: bytes) -> MagicMock:
    """Fetcher answering every source from canned payloads."""
    json_payloads: dict[str, Any] = {
        "station_information.json": station_information_payload(),
        "station_status.json": station_status_payload(),
        "vehicle_types.json": vehicle_types_payload(),
    }

    async def fetch_json(url: str, *, source: str, **_: Any) -> Any:
        if source == "weather":
            return weather_payload()
        if source == "pollution":
            return pollution_payload()
        if source.startswith("homeassistant:"):
            entity_id = source.split(":", 1)[1]
            state = "71.64" if entity_id == INDOOR_TEMP_ID else "45.5"
            return device_state_payload(entity_id, state)
        return json_payloads[url.rsplit("/", 1)[-1]]

    fetcher = MagicMock(spec=HttpFetcher)
    fetcher.fetch = AsyncMock(return_value=subway_feed)
    fetcher.fetch_json = AsyncMock(side_effect=fetch_json)
    return fetcher


@pytest.fixture
def services(settings: Settings, mock_fetcher: MagicMock) -> Services:
    """Services container wired to the mock fetcher."""
    weather = WeatherClient(40.75, -73.98, settings.weather_api_key, fetcher=mock_fetcher)
    citibike = CitibikeClient(fetcher=mock_fetcher)
    homeassistant = HomeAssistantClient(settings.ha_endpoint, settings.ha_api_key, fetcher=mock_fetcher)
    return Services(
        settings=settings,
        subway=SubwayClient(build_directory(), fetcher=mock_fetcher),
        weather=weather,
        citibike=citibike,
        homeassistant=homeassistant,
        hub=build_hub(settings, weather, citibike, homeassistant),
    )


@pytest.fixture
async def client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing."""
    app.dependency_overrides[get_services] = lambda: services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
