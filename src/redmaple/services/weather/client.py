"""OpenWeatherMap client with fixed-TTL caches for weather and pollution."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from redmaple.cache import TtlCache
from redmaple.errors import DecodeFailure
from redmaple.export.types import LOCATION_TAG, DataPoint
from redmaple.logging import get_logger
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.metrics import AirQuality
from redmaple.services.weather.models import PollutionData, WeatherData

if TYPE_CHECKING:
    from collections.abc import Callable

    from redmaple.export.types import Provider

logger = get_logger(__name__)

BASE_URL = "https://api.openweathermap.org"
DEFAULT_UNITS = "imperial"
WEATHER_TTL_SEC = 5 * 60
POLLUTION_TTL_SEC = 60 * 60


def _validate(model: type[WeatherData] | type[PollutionData], payload: Any, source: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        msg = f"Unexpected {source} payload"
        logger.error(msg, source=source, error=str(exc))
        raise DecodeFailure(msg) from exc


class WeatherClient:
    """Fetches the One Call forecast and current air pollution for one location."""

    def __init__(
        self,
        latitude: float,
        longitude: float,
        api_key: str,
        *,
        fetcher: HttpFetcher | None = None,
        base_url: str = BASE_URL,
        units: str = DEFAULT_UNITS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self._api_key = api_key
        self._fetcher = fetcher or HttpFetcher()
        self._base_url = base_url.rstrip("/")
        self._units = units
        self._weather: TtlCache[WeatherData] = TtlCache(
            self._fetch_weather, ttl=WEATHER_TTL_SEC, clock=clock, name="weather"
        )
        self._pollution: TtlCache[PollutionData] = TtlCache(
            self._fetch_pollution, ttl=POLLUTION_TTL_SEC, clock=clock, name="pollution"
        )

    async def get_weather(self) -> WeatherData:
        return await self._weather.get()

    async def get_pollution(self) -> PollutionData:
        return await self._pollution.get()

    async def get_air_quality(self) -> AirQuality:
        """Current AQI sub-indices.

        Raises:
            DecodeFailure: If the pollution payload carries no samples.
        """
        pollution = await self.get_pollution()
        if not pollution.data:
            msg = "Pollution payload has no samples"
            raise DecodeFailure(msg)
        c = pollution.data[0].components
        return AirQuality.from_components(
            co=c.carbon_monoxide,
            o3=c.ozone,
            pm2_5=c.particulates_2_5,
            pm10=c.particulates_10,
            so2=c.sulfur_dioxide,
            no2=c.nitrogen_dioxide,
        )

    def get_provider(self, location: str = "outdoor") -> Provider:
        """Provider exporting current temperature, humidity and AQI."""

        async def provide() -> DataPoint:
            weather = await self.get_weather()
            air = await self.get_air_quality()
            return DataPoint(
                table="weather",
                tags={LOCATION_TAG: location},
                fields={
                    "temperature": weather.current.temperature,
                    "humidity": weather.current.humidity,
                    "aqi": air.aqi,
                },
            )

        return provide

    async def _fetch_weather(self, _key: str) -> WeatherData:
        payload = await self._fetcher.fetch_json(
            f"{self._base_url}/data/3.0/onecall",
            source="weather",
            params=self._params(units=self._units),
        )
        return _validate(WeatherData, payload, "weather")

    async def _fetch_pollution(self, _key: str) -> PollutionData:
        payload = await self._fetcher.fetch_json(
            f"{self._base_url}/data/2.5/air_pollution",
            source="pollution",
            params=self._params(),
        )
        return _validate(PollutionData, payload, "pollution")

    def _params(self, **extra: str) -> dict[str, Any]:
        return {"lat": self.latitude, "lon": self.longitude, "appid": self._api_key, **extra}
