"""OpenWeatherMap weather and air pollution source."""

from redmaple.services.weather.client import WeatherClient
from redmaple.services.weather.models import PollutionData, WeatherData

__all__ = ["PollutionData", "WeatherClient", "WeatherData"]
