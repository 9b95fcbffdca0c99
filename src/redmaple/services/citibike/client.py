"""Bike share client over the GBFS station and vehicle type feeds."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from redmaple.cache import TtlCache
from redmaple.errors import DecodeFailure, NotFound
from redmaple.export.types import LOCATION_TAG, DataPoint
from redmaple.logging import get_logger
from redmaple.services.citibike.models import (
    CLASSIC_BIKE_TYPE_ID,
    EBIKE_TYPE_ID,
    BikeCounts,
    StationInfo,
    StationInformationResponse,
    StationStatusResponse,
    VehicleTypesResponse,
)
from redmaple.services.fetcher import HttpFetcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from redmaple.export.types import Provider

logger = get_logger(__name__)

BASE_URL = "https://gbfs.lyft.com/gbfs/2.3/bkn/en/"
STATION_INFO_ENDPOINT = "station_information.json"
STATION_STATUS_ENDPOINT = "station_status.json"
VEHICLE_TYPES_ENDPOINT = "vehicle_types.json"

# Used when a feed omits its ttl.
FALLBACK_TTL_SEC = 60

ModelT = TypeVar("ModelT", bound=BaseModel)


def _feed_ttl(response: Any) -> float | None:
    return response.ttl


class CitibikeClient:
    """Station lookups and bike counts, each feed cached for its declared ttl."""

    def __init__(
        self,
        *,
        fetcher: HttpFetcher | None = None,
        base_url: str = BASE_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher or HttpFetcher()
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._station_info: TtlCache[StationInformationResponse] = TtlCache(
            self._fetch_station_info,
            ttl=FALLBACK_TTL_SEC,
            ttl_from=_feed_ttl,
            clock=clock,
            name="citibike:station_information",
        )
        self._station_status: TtlCache[StationStatusResponse] = TtlCache(
            self._fetch_station_status,
            ttl=FALLBACK_TTL_SEC,
            ttl_from=_feed_ttl,
            clock=clock,
            name="citibike:station_status",
        )
        self._vehicle_types: TtlCache[VehicleTypesResponse] = TtlCache(
            self._fetch_vehicle_types,
            ttl=FALLBACK_TTL_SEC,
            ttl_from=_feed_ttl,
            clock=clock,
            name="citibike:vehicle_types",
        )
        self._stations_by_name: dict[str, StationInfo] = {}

    async def get_station_information(self) -> StationInformationResponse:
        return await self._station_info.get()

    async def get_station_status(self) -> StationStatusResponse:
        return await self._station_status.get()

    async def get_vehicle_types(self) -> VehicleTypesResponse:
        return await self._vehicle_types.get()

    async def get_station_id(self, name: str) -> str:
        """Resolve a station name to its GBFS station id.

        Raises:
            NotFound: If no station carries that name.
        """
        station = self._stations_by_name.get(name)
        if station is not None:
            return station.station_id

        info = await self.get_station_information()
        for s in info.data.stations:
            self._stations_by_name[s.name] = s

        station = self._stations_by_name.get(name)
        if station is None:
            msg = f"Bike station not found: {name}"
            raise NotFound(msg)
        return station.station_id

    async def get_num_bikes_at_station(self, name: str) -> BikeCounts:
        """Classic and e-bike counts at the named station.

        Raises:
            NotFound: If the station is unknown or missing from the status feed.
        """
        status = await self.get_station_status()
        station_id = await self.get_station_id(name)

        for station in status.data.stations:
            if station.station_id == station_id:
                counts = BikeCounts(
                    station=name,
                    classics=station.count_of(CLASSIC_BIKE_TYPE_ID),
                    ebikes=station.count_of(EBIKE_TYPE_ID),
                )
                logger.debug(
                    "Counted bikes",
                    station=name,
                    classics=counts.classics,
                    ebikes=counts.ebikes,
                )
                return counts

        msg = f"Bike station status not found: {name}"
        raise NotFound(msg)

    def get_provider(self, station_name: str) -> Provider:
        """Provider exporting classic and e-bike counts for one station."""

        async def provide() -> DataPoint:
            counts = await self.get_num_bikes_at_station(station_name)
            return DataPoint(
                table="citibike",
                tags={LOCATION_TAG: station_name},
                fields={"classics": counts.classics, "ebikes": counts.ebikes},
            )

        return provide

    async def _fetch_station_info(self, _key: str) -> StationInformationResponse:
        return await self._fetch(STATION_INFO_ENDPOINT, StationInformationResponse)

    async def _fetch_station_status(self, _key: str) -> StationStatusResponse:
        return await self._fetch(STATION_STATUS_ENDPOINT, StationStatusResponse)

    async def _fetch_vehicle_types(self, _key: str) -> VehicleTypesResponse:
        return await self._fetch(VEHICLE_TYPES_ENDPOINT, VehicleTypesResponse)

    async def _fetch(self, endpoint: str, model: type[ModelT]) -> ModelT:
        source = f"citibike:{endpoint}"
        payload = await self._fetcher.fetch_json(self._base_url + endpoint, source=source)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            msg = f"Unexpected {source} payload"
            logger.error(msg, source=source, error=str(exc))
            raise DecodeFailure(msg) from exc
