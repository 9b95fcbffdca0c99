"""Home Assistant REST client for sensor entities."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from pydantic import ValidationError

from redmaple.cache import TtlCache
from redmaple.errors import DecodeFailure, RedMapleError
from redmaple.export.types import LOCATION_TAG, DataPoint
from redmaple.logging import get_logger
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.homeassistant.models import DeviceState, SensorReading

if TYPE_CHECKING:
    from collections.abc import Callable

    from redmaple.export.types import Provider

logger = get_logger(__name__)

HOME_LOCATION = "home"
DEFAULT_STATE_TTL_SEC = 15


class HomeAssistantClient:
    """Reads entity states through a short-lived cache.

    Each real fetch pushes the entity's previous state aside, so trends are
    computed against the reading before the current one. Calls within the
    cache window see the same state and the same trend.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        fetcher: HttpFetcher | None = None,
        state_ttl_sec: float = DEFAULT_STATE_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._fetcher = fetcher or HttpFetcher()
        self._states: TtlCache[DeviceState] = TtlCache(
            self._fetch_state, ttl=state_ttl_sec, clock=clock, name="homeassistant"
        )
        self._last_states: dict[str, DeviceState] = {}
        self._previous_states: dict[str, DeviceState] = {}

    async def get_device_state(self, entity_id: str) -> DeviceState:
        """Current state of one entity, fetched at most once per cache window.

        Raises:
            FetchFailure: If the server is unreachable or answers >= 400.
            DecodeFailure: If the body is not a valid state object.
        """
        return await self._states.get(entity_id)

    def last_device_state(self, entity_id: str) -> DeviceState | None:
        """The most recently fetched state, or None if never fetched."""
        return self._last_states.get(entity_id)

    async def get_sensor_reading(self, temp_id: str, humidity_id: str) -> SensorReading:
        """Current temperature and humidity with trends against the prior reading.

        Raises:
            FetchFailure: If either entity cannot be fetched.
            DecodeFailure: If either entity reports a non-numeric state.
        """
        temp = await self.get_device_state(temp_id)
        humidity = await self.get_device_state(humidity_id)
        try:
            current_temp = temp.numeric_state
            current_humidity = humidity.numeric_state
        except ValueError as exc:
            msg = "Sensor returned a non-numeric state"
            logger.error(msg, temp=temp.state, humidity=humidity.state)
            raise DecodeFailure(msg) from exc

        return SensorReading.from_states(
            current_temp,
            current_humidity,
            self._previous_value(temp_id),
            self._previous_value(humidity_id),
        )

    def get_provider(self, *entity_ids: str) -> Provider:
        """Provider exporting each entity's state keyed by friendly name.

        Entities that fail to load are logged and left out of the point.
        """

        async def provide() -> DataPoint:
            fields: dict[str, str] = {}
            for entity_id in entity_ids:
                try:
                    state = await self.get_device_state(entity_id)
                except RedMapleError as exc:
                    logger.warning(
                        "Failed to capture device state",
                        entity_id=entity_id,
                        error=str(exc),
                    )
                    continue
                fields[state.attributes.friendly_name or entity_id] = state.state
            return DataPoint(
                table="home-assistant",
                tags={LOCATION_TAG: HOME_LOCATION},
                fields=fields,
            )

        return provide

    async def _fetch_state(self, entity_id: str) -> DeviceState:
        logger.debug("Getting device state", entity_id=entity_id)
        payload = await self._fetcher.fetch_json(
            f"{self.endpoint}/api/states/{entity_id}",
            source=f"homeassistant:{entity_id}",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "content-type": "application/json",
            },
        )
        try:
            state = DeviceState.model_validate(payload)
        except ValidationError as exc:
            msg = f"Unexpected state payload for {entity_id}"
            raise DecodeFailure(msg) from exc

        if entity_id in self._last_states:
            self._previous_states[entity_id] = self._last_states[entity_id]
        self._last_states[entity_id] = state
        return state

    def _previous_value(self, entity_id: str) -> float | None:
        state = self._previous_states.get(entity_id)
        if state is None:
            return None
        try:
            return state.numeric_state
        except ValueError:
            return None
