"""Weather endpoints.

Endpoints
---------
GET /weather/forecast   – hourly and daily forecast plus active alerts
GET /weather/sundial    – sun position on a 24h dial
GET /weather/aqi        – air quality index and per-pollutant sub-indices
GET /weather/sunrises   – sunrise, sunset, moon phase and UV for the coming days
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from redmaple.dependencies import Services, get_services
from redmaple.errors import DecodeFailure
from redmaple.logging import get_logger
from redmaple.services.metrics import (
    hour_stamp,
    moon_phase_icon,
    moon_phase_index,
    sundial,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/weather", tags=["weather"])

HOURLY_LIMIT = 13
DAILY_LIMIT = 6
SUNRISE_DAYS = 5
MM_TO_INCHES = 0.0393701


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HourlyForecast(BaseModel):
    stamp: str
    icon: int
    temperature: int
    humidity: int
    wind_speed: int
    rain_chance: int
    total_precipitation: str = ""
    precipitation_icon: str = ""


class DailyForecast(BaseModel):
    day_of_week: str
    icon: int
    high_temp: int
    low_temp: int
    humidity: int
    rain_chance: int
    total_precipitation: str = ""
    precipitation_icon: str = ""


class AlertSummary(BaseModel):
    title: str
    stamp: str
    description: str


class ForecastResponse(BaseModel):
    hourly: list[HourlyForecast]
    daily: list[DailyForecast]
    alerts: list[AlertSummary]


class SundialResponse(BaseModel):
    rotation: float
    color: str


class AqiResponse(BaseModel):
    aqi: int
    level: int
    carbon_monoxide: int
    ozone: int
    particulates_2_5: int
    particulates_10: int
    sulfur_dioxide: int
    nitrogen_dioxide: int


class SunForecast(BaseModel):
    day_of_week: str
    sunrise: str
    sunset: str
    moon_icon: str
    uv_index: int


class SunrisesResponse(BaseModel):
    forecast: list[SunForecast]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def precipitation(rain_mm: float, snow_mm: float) -> tuple[str, str]:
    """Inches of precipitation (one decimal) and the matching icon."""
    if rain_mm > 0 and snow_mm > 0:
        return f"{rain_mm * MM_TO_INCHES:.1f}", "wi-rain-mix"
    if rain_mm > 0:
        return f"{rain_mm * MM_TO_INCHES:.1f}", "wi-rain"
    if snow_mm > 0:
        return f"{snow_mm * MM_TO_INCHES:.1f}", "wi-snow"
    return "", ""


def _local(timestamp: int, tz: ZoneInfo) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=tz)


def _day_of_week(dt: datetime) -> str:
    return dt.strftime("%a").upper()


def _clock_time(dt: datetime) -> str:
    return f"{dt.hour}:{dt.minute:02d}"


def _icon(descriptions: list) -> int:
    return descriptions[0].id if descriptions else 0


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/forecast", response_model=ForecastResponse, summary="Hourly and daily forecast")
async def get_forecast(services: Annotated[Services, Depends(get_services)]) -> ForecastResponse:
    tz = ZoneInfo(services.settings.timezone)
    weather = await services.weather.get_weather()

    hourly: list[HourlyForecast] = []
    for hour in weather.hourly[:HOURLY_LIMIT]:
        total, icon = precipitation(hour.rain.millimeters_per_hour, hour.snow.millimeters_per_hour)
        hourly.append(
            HourlyForecast(
                stamp=hour_stamp(_local(hour.timestamp, tz)),
                icon=_icon(hour.description),
                temperature=int(hour.temperature),
                humidity=hour.humidity,
                wind_speed=int(hour.wind_speed),
                rain_chance=int(hour.probability_of_precipitation * 100),
                total_precipitation=total,
                precipitation_icon=icon,
            )
        )

    daily: list[DailyForecast] = []
    for day in weather.daily[:DAILY_LIMIT]:
        total, icon = precipitation(day.rain, day.snow)
        daily.append(
            DailyForecast(
                day_of_week=_day_of_week(_local(day.timestamp, tz)),
                icon=_icon(day.description),
                high_temp=int(day.temperature.max),
                low_temp=int(day.temperature.min),
                humidity=day.humidity,
                rain_chance=int(day.probability_of_precipitation * 100),
                total_precipitation=total,
                precipitation_icon=icon,
            )
        )

    alerts: list[AlertSummary] = []
    for alert in weather.alerts:
        start = _local(alert.start, tz)
        end = _local(alert.end, tz)
        alerts.append(
            AlertSummary(
                title=alert.event,
                stamp=(
                    f"{start.strftime('%b').upper()} {start.day} {hour_stamp(start)} to "
                    f"{end.strftime('%b').upper()} {end.day} {hour_stamp(end)}"
                ),
                description=alert.description,
            )
        )

    return ForecastResponse(hourly=hourly, daily=daily, alerts=alerts)


@router.get("/sundial", response_model=SundialResponse, summary="Sun position dial")
async def get_sundial(services: Annotated[Services, Depends(get_services)]) -> SundialResponse:
    weather = await services.weather.get_weather()
    if len(weather.daily) < 2:
        msg = "Forecast has no sunrise for tomorrow"
        raise DecodeFailure(msg)

    dial = sundial(
        sunrise=datetime.fromtimestamp(weather.current.sunrise, tz=timezone.utc),
        sunset=datetime.fromtimestamp(weather.current.sunset, tz=timezone.utc),
        tomorrow_sunrise=datetime.fromtimestamp(weather.daily[1].sunrise, tz=timezone.utc),
        now=datetime.now(timezone.utc),
    )
    return SundialResponse(rotation=dial.rotation, color=dial.color)


@router.get("/aqi", response_model=AqiResponse, summary="Air quality index")
async def get_aqi(services: Annotated[Services, Depends(get_services)]) -> AqiResponse:
    air = await services.weather.get_air_quality()
    logger.debug("Computed air quality", aqi=air.aqi, level=air.level)
    return AqiResponse(
        aqi=air.aqi,
        level=air.level,
        carbon_monoxide=air.carbon_monoxide,
        ozone=air.ozone,
        particulates_2_5=air.particulates_2_5,
        particulates_10=air.particulates_10,
        sulfur_dioxide=air.sulfur_dioxide,
        nitrogen_dioxide=air.nitrogen_dioxide,
    )


@router.get("/sunrises", response_model=SunrisesResponse, summary="Sun and moon for the coming days")
async def get_sunrises(services: Annotated[Services, Depends(get_services)]) -> SunrisesResponse:
    tz = ZoneInfo(services.settings.timezone)
    weather = await services.weather.get_weather()

    forecast = [
        SunForecast(
            day_of_week=_day_of_week(_local(day.sunrise, tz)),
            sunrise=_clock_time(_local(day.sunrise, tz)),
            sunset=_clock_time(_local(day.sunset, tz)),
            moon_icon=moon_phase_icon(moon_phase_index(day.moon_phase)),
            uv_index=round(day.uv_index),
        )
        for day in weather.daily[:SUNRISE_DAYS]
    ]
    return SunrisesResponse(forecast=forecast)
