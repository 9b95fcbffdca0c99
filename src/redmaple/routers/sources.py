"""Bike share and home sensor endpoints.

Endpoints
---------
GET /citibike               – bikes available at each configured station
GET /sensors/{location}     – indoor or outdoor temperature and humidity
"""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from redmaple.dependencies import Services, get_services
from redmaple.logging import get_logger
from redmaple.services.homeassistant import SensorReading

logger = get_logger(__name__)

router = APIRouter()


class StationBikes(BaseModel):
    name: str
    total_bikes: int
    classics: int
    ebikes: int


class CitibikeResponse(BaseModel):
    stations: list[StationBikes]


@router.get("/citibike", response_model=CitibikeResponse, tags=["citibike"])
async def get_citibike(services: Annotated[Services, Depends(get_services)]) -> CitibikeResponse:
    stations: list[StationBikes] = []
    for name in services.settings.citibike_station_names:
        counts = await services.citibike.get_num_bikes_at_station(name)
        stations.append(
            StationBikes(
                name=name,
                total_bikes=counts.total,
                classics=counts.classics,
                ebikes=counts.ebikes,
            )
        )
    return CitibikeResponse(stations=stations)


@router.get("/sensors/{location}", response_model=SensorReading, tags=["sensors"])
async def get_sensor(
    location: Literal["indoor", "outdoor"],
    services: Annotated[Services, Depends(get_services)],
) -> SensorReading:
    settings = services.settings
    if location == "indoor":
        temp_id, humidity_id = settings.ha_indoor_temp_id, settings.ha_indoor_humidity_id
    else:
        temp_id, humidity_id = settings.ha_outdoor_temp_id, settings.ha_outdoor_humidity_id

    if not temp_id or not humidity_id:
        raise HTTPException(status_code=404, detail=f"No {location} sensors configured")

    reading = await services.homeassistant.get_sensor_reading(temp_id, humidity_id)
    logger.debug("Sensor reading", location=location, reading=reading.model_dump())
    return reading
