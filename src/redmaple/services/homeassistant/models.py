"""Home Assistant entity state and the sensor reading derived from it."""

from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

HUMIDITY_LOW = 40
HUMIDITY_HIGH = 60


class StateAttributes(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    state_class: str = ""
    unit: str = Field(default="", alias="unit_of_measurement")
    friendly_name: str = ""


class DeviceState(BaseModel):
    """Response of ``GET /api/states/{entity_id}``."""

    model_config = ConfigDict(extra="ignore")

    entity_id: str
    state: str
    attributes: StateAttributes = Field(default_factory=StateAttributes)
    last_changed: datetime | None = None
    last_reported: datetime | None = None
    last_updated: datetime | None = None

    @property
    def numeric_state(self) -> float:
        """The state as a float.

        Raises:
            ValueError: If the entity reports a non-numeric state.
        """
        return float(self.state)


def humidity_level(humidity: int) -> int:
    """0 when dry, 1 when comfortable, 2 when humid."""
    if humidity > HUMIDITY_HIGH:
        return 2
    if humidity >= HUMIDITY_LOW:
        return 1
    return 0


def _split(value: float) -> tuple[int, int]:
    fractional, integer = math.modf(value)
    return int(integer), int(math.floor(fractional * 100))


class SensorReading(BaseModel):
    """Temperature and humidity split for display, with trend flags."""

    integer_temp: int
    fractional_temp: int
    integer_humidity: int
    fractional_humidity: int
    is_temp_trending_up: bool
    is_humidity_trending_up: bool
    humidity_level: int

    @classmethod
    def from_states(
        cls,
        current_temp: float,
        current_humidity: float,
        last_temp: float | None = None,
        last_humidity: float | None = None,
    ) -> SensorReading:
        """Build a reading from the current and previous sensor values.

        A missing previous value counts as 0.
        """
        integer_temp, fractional_temp = _split(current_temp)
        integer_humidity, fractional_humidity = _split(current_humidity)
        return cls(
            integer_temp=integer_temp,
            fractional_temp=fractional_temp,
            integer_humidity=integer_humidity,
            fractional_humidity=fractional_humidity,
            is_temp_trending_up=(last_temp or 0.0) < current_temp,
            is_humidity_trending_up=(last_humidity or 0.0) < current_humidity,
            humidity_level=humidity_level(integer_humidity),
        )
