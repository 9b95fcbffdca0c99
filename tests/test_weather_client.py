"""Tests for the weather client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from redmaple.errors import DecodeFailure, FetchFailure
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.weather import WeatherClient

from .fixtures.clock import FakeClock
from .fixtures.source_payloads import pollution_payload, weather_payload


def _fetcher(weather: object = None, pollution: object = None) -> MagicMock:
    async def fetch_json(url: str, *, source: str, params: dict | None = None, **_: object) -> object:
        if source == "weather":
            return weather if weather is not None else weather_payload()
        return pollution if pollution is not None else pollution_payload()

    fetcher = MagicMock(spec=HttpFetcher)
    fetcher.fetch_json = AsyncMock(side_effect=fetch_json)
    return fetcher


def _sources(fetcher: MagicMock) -> list[str]:
    return [c.kwargs["source"] for c in fetcher.fetch_json.await_args_list]


class TestWeatherClient:
    """Unit tests for WeatherClient."""

    @pytest.mark.asyncio
    async def test_get_weather_parses_payload(self) -> None:
        fetcher = _fetcher()
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=FakeClock())

        weather = await client.get_weather()

        assert weather.current.temperature == 72.5
        assert weather.current.description[0].id == 800
        assert len(weather.daily) == 7
        assert weather.hourly[1].rain.millimeters_per_hour == 2.0
        assert weather.alerts[0].sender == "NWS New York"

    @pytest.mark.asyncio
    async def test_request_parameters(self) -> None:
        fetcher = _fetcher()
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=FakeClock())

        await client.get_weather()
        await client.get_pollution()

        weather_call, pollution_call = fetcher.fetch_json.await_args_list
        assert weather_call.args[0] == "https://api.openweathermap.org/data/3.0/onecall"
        assert weather_call.kwargs["params"] == {
            "lat": 40.75,
            "lon": -73.98,
            "appid": "key",
            "units": "imperial",
        }
        assert pollution_call.args[0] == "https://api.openweathermap.org/data/2.5/air_pollution"
        assert "units" not in pollution_call.kwargs["params"]

    @pytest.mark.asyncio
    async def test_weather_cached_for_five_minutes(self) -> None:
        clock = FakeClock()
        fetcher = _fetcher()
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=clock)

        await client.get_weather()
        clock.advance(299)
        await client.get_weather()
        assert _sources(fetcher) == ["weather"]

        clock.advance(1)
        await client.get_weather()
        assert _sources(fetcher) == ["weather", "weather"]

    @pytest.mark.asyncio
    async def test_pollution_cached_for_an_hour(self) -> None:
        clock = FakeClock()
        fetcher = _fetcher()
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=clock)

        await client.get_pollution()
        clock.advance(3599)
        await client.get_pollution()
        assert _sources(fetcher) == ["pollution"]

        clock.advance(1)
        await client.get_pollution()
        assert _sources(fetcher) == ["pollution", "pollution"]

    @pytest.mark.asyncio
    async def test_invalid_payload_raises_decode_failure(self) -> None:
        fetcher = _fetcher(weather={"current": {"temp": "hot"}})
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=FakeClock())

        with pytest.raises(DecodeFailure):
            await client.get_weather()

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self) -> None:
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.fetch_json = AsyncMock(side_effect=FetchFailure("down"))
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=FakeClock())

        with pytest.raises(FetchFailure):
            await client.get_weather()

    @pytest.mark.asyncio
    async def test_air_quality(self) -> None:
        client = WeatherClient(40.75, -73.98, "key", fetcher=_fetcher(), clock=FakeClock())

        air = await client.get_air_quality()

        assert air.aqi == 90
        assert air.level == 2

    @pytest.mark.asyncio
    async def test_air_quality_without_samples_raises(self) -> None:
        fetcher = _fetcher(pollution=pollution_payload(samples=0))
        client = WeatherClient(40.75, -73.98, "key", fetcher=fetcher, clock=FakeClock())

        with pytest.raises(DecodeFailure):
            await client.get_air_quality()

    @pytest.mark.asyncio
    async def test_provider(self) -> None:
        client = WeatherClient(40.75, -73.98, "key", fetcher=_fetcher(), clock=FakeClock())

        point = await client.get_provider()()

        assert point.table == "weather"
        assert point.tags == {"location": "outdoor"}
        assert point.fields == {"temperature": 72.5, "humidity": 55, "aqi": 90}
