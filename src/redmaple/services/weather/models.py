"""OpenWeatherMap payload models (One Call 3.0 and Air Pollution 2.5)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Description(_Payload):
    id: int = 0
    main: str = ""
    description: str = ""
    icon: str = ""


class Precipitation(_Payload):
    millimeters_per_hour: float = Field(default=0.0, alias="1h")


class Current(_Payload):
    timestamp: int = Field(default=0, alias="dt")
    sunrise: int = 0
    sunset: int = 0
    temperature: float = Field(default=0.0, alias="temp")
    feels_like: float = 0.0
    humidity: int = 0
    uv_index: float = Field(default=0.0, alias="uvi")
    wind_speed: float = 0.0
    description: list[Description] = Field(default_factory=list, alias="weather")


class Hourly(_Payload):
    timestamp: int = Field(default=0, alias="dt")
    temperature: float = Field(default=0.0, alias="temp")
    humidity: int = 0
    wind_speed: float = 0.0
    probability_of_precipitation: float = Field(default=0.0, alias="pop")
    rain: Precipitation = Field(default_factory=Precipitation)
    snow: Precipitation = Field(default_factory=Precipitation)
    description: list[Description] = Field(default_factory=list, alias="weather")


class DailyTemperature(_Payload):
    day: float = 0.0
    min: float = 0.0
    max: float = 0.0
    night: float = 0.0


class Daily(_Payload):
    timestamp: int = Field(default=0, alias="dt")
    sunrise: int = 0
    sunset: int = 0
    moonrise: int = 0
    moonset: int = 0
    moon_phase: float = 0.0
    summary: str = ""
    temperature: DailyTemperature = Field(default_factory=DailyTemperature, alias="temp")
    humidity: int = 0
    uv_index: float = Field(default=0.0, alias="uvi")
    probability_of_precipitation: float = Field(default=0.0, alias="pop")
    rain: float = 0.0
    snow: float = 0.0
    description: list[Description] = Field(default_factory=list, alias="weather")


class WeatherAlert(_Payload):
    sender: str = Field(default="", alias="sender_name")
    event: str = ""
    start: int = 0
    end: int = 0
    description: str = ""


class WeatherData(_Payload):
    latitude: float = Field(default=0.0, alias="lat")
    longitude: float = Field(default=0.0, alias="lon")
    timezone: str = ""
    current: Current = Field(default_factory=Current)
    hourly: list[Hourly] = Field(default_factory=list)
    daily: list[Daily] = Field(default_factory=list)
    alerts: list[WeatherAlert] = Field(default_factory=list)


class PollutionComponents(_Payload):
    """Pollutant concentrations in micrograms per cubic metre."""

    carbon_monoxide: float = Field(default=0.0, alias="co")
    nitrogen_monoxide: float = Field(default=0.0, alias="no")
    nitrogen_dioxide: float = Field(default=0.0, alias="no2")
    ozone: float = Field(default=0.0, alias="o3")
    sulfur_dioxide: float = Field(default=0.0, alias="so2")
    particulates_2_5: float = Field(default=0.0, alias="pm2_5")
    particulates_10: float = Field(default=0.0, alias="pm10")
    ammonia: float = Field(default=0.0, alias="nh3")


class PollutionSample(_Payload):
    timestamp: int = Field(default=0, alias="dt")
    components: PollutionComponents = Field(default_factory=PollutionComponents)


class PollutionData(_Payload):
    data: list[PollutionSample] = Field(default_factory=list, alias="list")
