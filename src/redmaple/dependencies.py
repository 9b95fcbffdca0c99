"""Construction of the source clients and export hub shared by the app."""

from __future__ import annotations

from dataclasses import dataclass

from redmaple.config import Settings, get_settings
from redmaple.export import ExportHub, InfluxDBExporter, LogExporter
from redmaple.logging import get_logger
from redmaple.services.citibike import CitibikeClient
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.homeassistant import HomeAssistantClient
from redmaple.services.subway import StopDirectory, SubwayClient
from redmaple.services.weather import WeatherClient

logger = get_logger(__name__)


@dataclass
class Services:
    """Everything a request handler may need, built once per process."""

    settings: Settings
    subway: SubwayClient
    weather: WeatherClient
    citibike: CitibikeClient
    homeassistant: HomeAssistantClient
    hub: ExportHub


def build_hub(
    settings: Settings,
    weather: WeatherClient,
    citibike: CitibikeClient,
    homeassistant: HomeAssistantClient,
) -> ExportHub:
    """Register providers and exporters according to ``settings``."""
    hub = ExportHub(interval_sec=settings.export_interval_sec)

    if settings.ha_device_ids:
        hub.add_provider(homeassistant.get_provider(*settings.ha_device_ids), name="home-assistant")
    for station in settings.citibike_station_names:
        hub.add_provider(citibike.get_provider(station), name=f"citibike:{station}")
    if settings.weather_api_key:
        hub.add_provider(weather.get_provider(), name="weather")

    if settings.influxdb_enabled:
        hub.add_exporter(
            InfluxDBExporter(
                settings.influxdb_endpoint,
                settings.influxdb_token,
                settings.influxdb_database,
            )
        )
    if settings.debug:
        hub.add_exporter(LogExporter())

    return hub


def build_services(settings: Settings | None = None) -> Services:
    """Build every client from settings.

    Raises:
        ConfigurationError: If the stop directory cannot be loaded.
        ValueError: If the weather location is malformed.
    """
    settings = settings or get_settings()

    directory = StopDirectory.from_path(settings.stops_path)
    subway = SubwayClient(
        directory,
        fetcher=HttpFetcher(
            timeout_sec=settings.subway_fetch_timeout_sec,
            max_retries=settings.subway_max_retries,
            backoff_base=settings.subway_backoff_base,
        ),
        api_key=settings.subway_api_key,
        feed_ttl_sec=settings.subway_feed_ttl_sec,
    )
    latitude, longitude = settings.weather_coordinates
    weather = WeatherClient(latitude, longitude, settings.weather_api_key)
    citibike = CitibikeClient()
    homeassistant = HomeAssistantClient(
        settings.ha_endpoint,
        settings.ha_api_key,
        state_ttl_sec=settings.ha_state_ttl_sec,
    )

    hub = build_hub(settings, weather, citibike, homeassistant)
    logger.info(
        "Services built",
        stops=len(directory),
        providers=hub.provider_names,
    )
    return Services(
        settings=settings,
        subway=subway,
        weather=weather,
        citibike=citibike,
        homeassistant=homeassistant,
        hub=hub,
    )


# Singleton instance for the app lifecycle
_services_instance: Services | None = None


def get_services() -> Services:
    """Get or create the singleton services container."""
    global _services_instance
    if _services_instance is None:
        _services_instance = build_services()
    return _services_instance


def reset_services() -> None:
    """Reset the singleton (for testing)."""
    global _services_instance
    _services_instance = None
