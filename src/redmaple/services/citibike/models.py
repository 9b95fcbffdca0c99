"""GBFS 2.3 payload models for the bike share feeds."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

CLASSIC_BIKE_TYPE_ID = "1"
EBIKE_TYPE_ID = "2"


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StationInfo(_Payload):
    station_id: str
    name: str = ""
    short_name: str = ""
    region_id: str = ""
    latitude: float = Field(default=0.0, alias="lat")
    longitude: float = Field(default=0.0, alias="lon")
    capacity: int = 0


class VehicleTypeCount(_Payload):
    vehicle_type_id: str
    count: int = 0


class StationStatus(_Payload):
    station_id: str
    num_bikes_available: int = 0
    num_ebikes_available: int = 0
    num_bikes_disabled: int = 0
    num_docks_available: int = 0
    num_docks_disabled: int = 0
    is_installed: int = 0
    is_renting: int = 0
    is_returning: int = 0
    last_reported: int = 0
    vehicle_types_available: list[VehicleTypeCount] = Field(default_factory=list)

    def count_of(self, vehicle_type_id: str) -> int:
        """Available vehicles of one type, 0 when the type is not listed."""
        for available in self.vehicle_types_available:
            if available.vehicle_type_id == vehicle_type_id:
                return available.count
        return 0


class VehicleType(_Payload):
    vehicle_type_id: str
    form_factor: str = ""
    propulsion_type: str = ""


class _Feed(_Payload):
    last_updated: int = 0
    ttl: int | None = None
    version: str = ""


class StationInformationData(_Payload):
    stations: list[StationInfo] = Field(default_factory=list)


class StationInformationResponse(_Feed):
    data: StationInformationData = Field(default_factory=StationInformationData)


class StationStatusData(_Payload):
    stations: list[StationStatus] = Field(default_factory=list)


class StationStatusResponse(_Feed):
    data: StationStatusData = Field(default_factory=StationStatusData)


class VehicleTypesData(_Payload):
    vehicle_types: list[VehicleType] = Field(default_factory=list)


class VehicleTypesResponse(_Feed):
    data: VehicleTypesData = Field(default_factory=VehicleTypesData)


class BikeCounts(BaseModel):
    """Bikes available at one station, split by type."""

    station: str
    classics: int
    ebikes: int

    @property
    def total(self) -> int:
        return self.classics + self.ebikes
