"""Pure numeric helpers derived from already-fetched source data.

All functions here are stateless and free of I/O so they can be unit-tested
without network access or a settings object.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

# ---------------------------------------------------------------------------
# Air quality index
# ---------------------------------------------------------------------------

# https://document.airnow.gov/technical-assistance-document-for-the-reporting-of-daily-air-quailty.pdf
AQI_BREAKPOINTS = (0.0, 50, 51, 100, 101, 150, 151, 200, 201, 300, 301)
O3_BREAKPOINTS = (0.0, 0.054, 0.055, 0.070, 0.071, 0.085, 0.086, 0.105, 0.106, 0.200, 0.201)
PM25_BREAKPOINTS = (0.0, 9.0, 9.1, 35.4, 35.5, 55.4, 55.5, 125.4, 125.5, 225.4, 225.5)
PM10_BREAKPOINTS = (0.0, 54, 55, 154, 155, 254, 255, 354, 355, 424, 425)
CO_BREAKPOINTS = (0.0, 4.4, 4.5, 9.4, 9.5, 12.4, 12.5, 15.4, 15.5, 30.4, 30.5)
SO2_BREAKPOINTS = (0.0, 35, 36, 75, 76, 185, 186, 304, 305, 604, 605)
NO2_BREAKPOINTS = (0.0, 53, 54, 100, 101, 360, 361, 649, 650, 1249, 1250)

# ug/m3 -> ppm (CO, O3) or ppb (SO2, NO2) at 25C
CO_UG_PER_PPB = 1.15
O3_UG_PER_PPB = 1.96
SO2_UG_PER_PPB = 2.62
NO2_UG_PER_PPB = 1.88


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def calculate_aqi(concentration: float, breakpoints: tuple[float, ...]) -> int:
    """Interpolate a pollutant concentration onto the AQI scale.

    ``breakpoints`` holds a leading zero followed by five low/high pairs. The
    first pair whose upper bound exceeds the concentration is used:

        aqi = (aqi_hi - aqi_lo) / (con_hi - con_lo) * (c - con_lo) + aqi_lo

    A concentration at or above the last upper bound returns 0; the scale
    has no category for it.
    """
    i = 1
    while i < len(breakpoints) - 1:
        if concentration < breakpoints[i]:
            aqi = (AQI_BREAKPOINTS[i] - AQI_BREAKPOINTS[i - 1]) / (
                breakpoints[i] - breakpoints[i - 1]
            ) * (concentration - breakpoints[i - 1]) + AQI_BREAKPOINTS[i - 1]
            return _round_half_up(aqi)
        i += 2
    return 0


def aqi_level(aqi: int) -> int:
    """Bucket an AQI into the five display levels (1 good ... 5 hazardous)."""
    if aqi <= 50:
        return 1
    if aqi <= 100:
        return 2
    if aqi <= 150:
        return 3
    if aqi <= 200:
        return 4
    return 5


@dataclass(frozen=True)
class AirQuality:
    carbon_monoxide: int
    ozone: int
    particulates_2_5: int
    particulates_10: int
    sulfur_dioxide: int
    nitrogen_dioxide: int

    @property
    def aqi(self) -> int:
        return max(
            self.carbon_monoxide,
            self.ozone,
            self.particulates_2_5,
            self.particulates_10,
            self.sulfur_dioxide,
            self.nitrogen_dioxide,
        )

    @property
    def level(self) -> int:
        return aqi_level(self.aqi)

    @classmethod
    def from_components(
        cls,
        *,
        co: float,
        o3: float,
        pm2_5: float,
        pm10: float,
        so2: float,
        no2: float,
    ) -> AirQuality:
        """Build sub-indices from concentrations in ug/m3."""
        return cls(
            carbon_monoxide=calculate_aqi(co / CO_UG_PER_PPB / 1000, CO_BREAKPOINTS),
            ozone=calculate_aqi(o3 / O3_UG_PER_PPB / 1000, O3_BREAKPOINTS),
            particulates_2_5=calculate_aqi(pm2_5, PM25_BREAKPOINTS),
            particulates_10=calculate_aqi(pm10, PM10_BREAKPOINTS),
            sulfur_dioxide=calculate_aqi(so2 / SO2_UG_PER_PPB, SO2_BREAKPOINTS),
            nitrogen_dioxide=calculate_aqi(no2 / NO2_UG_PER_PPB, NO2_BREAKPOINTS),
        )


# ---------------------------------------------------------------------------
# Sundial
# ---------------------------------------------------------------------------

DAY_COLOR = "#00C6FF"
NIGHT_COLOR = "#303030"
TWILIGHT_COLOR = "#FF5A36"


@dataclass(frozen=True)
class Sundial:
    rotation: float
    color: str


def sundial(
    sunrise: datetime,
    sunset: datetime,
    tomorrow_sunrise: datetime,
    now: datetime,
) -> Sundial:
    """Place ``now`` on a 360 degree dial with solar noon at 0.

    Sunrise to sunset covers 180 degrees, sunset to the next sunrise the
    other 180. Before today's sunrise, last night's sunset is estimated as
    today's sunset minus one day. The five degrees before sunset and before
    sunrise are drawn in the twilight color.
    """
    if sunrise < now < sunset:
        daylight = (sunset - sunrise).total_seconds()
        rotation = 180.0 * (now - sunrise).total_seconds() / daylight
        color = DAY_COLOR
    elif now >= sunset:
        night = (tomorrow_sunrise - sunset).total_seconds()
        rotation = 180.0 * (now - sunset).total_seconds() / night + 180
        color = NIGHT_COLOR
    else:
        yesterday_sunset = sunset - timedelta(days=1)
        night = (sunrise - yesterday_sunset).total_seconds()
        rotation = 180.0 * (now - yesterday_sunset).total_seconds() / night + 180
        color = NIGHT_COLOR

    rotation -= 90.0

    if 85 <= rotation < 90 or 265 <= rotation < 270:
        color = TWILIGHT_COLOR

    return Sundial(rotation=rotation, color=color)


# ---------------------------------------------------------------------------
# Moon phase
# ---------------------------------------------------------------------------

MOON_PHASE_STEPS = 28

_MOON_ICONS: tuple[str, ...] = (
    "wi-moon-new",
    *(f"wi-moon-waxing-crescent-{n}" for n in range(1, 7)),
    "wi-moon-first-quarter",
    *(f"wi-moon-waxing-gibbous-{n}" for n in range(1, 7)),
    "wi-moon-full",
    *(f"wi-moon-waning-gibbous-{n}" for n in range(1, 7)),
    "wi-moon-third-quarter",
    *(f"wi-moon-waning-crescent-{n}" for n in range(1, 7)),
)


def moon_phase_index(phase: float) -> int:
    """Convert a 0-1 lunation fraction into a 0-27 step."""
    return int(phase * MOON_PHASE_STEPS)


def moon_phase_icon(index: int) -> str:
    """Icon name for a moon phase step; the index wraps every 28 steps."""
    step = index % MOON_PHASE_STEPS
    if 0 <= step < len(_MOON_ICONS):
        return _MOON_ICONS[step]
    return "wi-moon-new"


# ---------------------------------------------------------------------------
# Time formatting
# ---------------------------------------------------------------------------


def hour_stamp(dt: datetime) -> str:
    """Format the hour of ``dt`` as "12 AM", "3 AM", "12 PM", "5 PM"."""
    if dt.hour == 0:
        return "12 AM"
    if dt.hour < 12:
        return f"{dt.hour} AM"
    if dt.hour == 12:
        return "12 PM"
    return f"{dt.hour - 12} PM"


def minutes_until(arrival: int, now: datetime) -> int:
    """Whole minutes from ``now`` until the unix timestamp ``arrival``."""
    return int((arrival - now.timestamp()) / 60)
