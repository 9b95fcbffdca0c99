"""Home Assistant sensor source."""

from redmaple.services.homeassistant.client import HomeAssistantClient
from redmaple.services.homeassistant.models import DeviceState, SensorReading

__all__ = ["DeviceState", "HomeAssistantClient", "SensorReading"]
