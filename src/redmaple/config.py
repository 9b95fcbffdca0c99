"""Application configuration via environment variables."""

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Red Maple Dashboard"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    timezone: str = "America/New_York"
    data_dir: Path = Field(
        default=Path("./data"),
        validation_alias=AliasChoices("DATA_DIR", "VENDOR_DIR"),
    )

    # Subway
    subway_stops: str = "L03S,G29N"
    subway_api_key: str = ""
    subway_feed_ttl_sec: int = Field(default=60, ge=0)
    subway_fetch_timeout_sec: int = 10
    subway_max_retries: int = Field(default=2, ge=1)
    subway_backoff_base: float = 2.0

    # Weather
    weather_location: str = Field(
        default="40.75261,-73.97728",
        validation_alias=AliasChoices("WEATHER_LOC", "WEATHER_LOCATION"),
    )
    weather_api_key: str = ""

    # Citibike
    citibike_stations: str = "Park Ave & E 42 St,Park Ave & E 41 St"

    # Home Assistant
    ha_endpoint: str = "http://localhost:8123"
    ha_api_key: str = ""
    ha_state_ttl_sec: float = Field(default=15, ge=0)
    ha_indoor_temp_id: str = ""
    ha_indoor_humidity_id: str = Field(
        default="",
        validation_alias=AliasChoices("HA_INDOOR_HUMID_ID", "HA_INDOOR_HUMIDITY_ID"),
    )
    ha_outdoor_temp_id: str = ""
    ha_outdoor_humidity_id: str = Field(
        default="",
        validation_alias=AliasChoices("HA_OUTDOOR_HUMID_ID", "HA_OUTDOOR_HUMIDITY_ID"),
    )

    # Export hub
    export_interval_sec: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("EXPORT_INTERVAL", "EXPORT_INTERVAL_SEC"),
    )
    export_auto_start: bool = True

    # InfluxDB sink
    influxdb_enabled: bool = False
    influxdb_endpoint: str = ""
    influxdb_token: str = ""
    influxdb_database: str = ""

    @property
    def stops_path(self) -> Path:
        """Location of the MTA stops reference table."""
        return self.data_dir / "mta" / "stops.txt"

    @property
    def subway_stop_ids(self) -> list[str]:
        return _split_list(self.subway_stops)

    @property
    def citibike_station_names(self) -> list[str]:
        return _split_list(self.citibike_stations)

    @property
    def weather_coordinates(self) -> tuple[float, float]:
        """Parse ``weather_location`` ("lat,lon") into a coordinate pair.

        Raises:
            ValueError: If the location is not two comma separated floats.
        """
        parts = _split_list(self.weather_location)
        if len(parts) != 2:
            msg = f"Invalid weather location: {self.weather_location!r}"
            raise ValueError(msg)
        return float(parts[0]), float(parts[1])

    @property
    def ha_device_ids(self) -> list[str]:
        """All configured Home Assistant entity ids, in a stable order."""
        ids = [
            self.ha_outdoor_temp_id,
            self.ha_outdoor_humidity_id,
            self.ha_indoor_temp_id,
            self.ha_indoor_humidity_id,
        ]
        return [device_id for device_id in ids if device_id]

    @field_validator("export_interval_sec", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() and not _is_number(value):
            return parse_duration(value)
        return value


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def parse_duration(value: str) -> float:
    """Parse a Go-style duration ("30s", "1m", "1h30m", "1.5h") into seconds.

    Raises:
        ValueError: If the text is not a sequence of number and unit pairs.
    """
    text = value.strip()
    pos = 0
    total = 0.0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            msg = f"Invalid duration: {value!r}"
            raise ValueError(msg)
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0:
        msg = f"Invalid duration: {value!r}"
        raise ValueError(msg)
    return total


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
