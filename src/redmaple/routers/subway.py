"""Subway endpoints.

Endpoints
---------
GET /subway/arrivals      – soonest trains at each configured stop
GET /subway/line?line=L   – station/gap strip for one line
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from redmaple.dependencies import Services, get_services
from redmaple.logging import get_logger
from redmaple.services.metrics import minutes_until
from redmaple.services.subway import TrainLine

logger = get_logger(__name__)

router = APIRouter(prefix="/subway", tags=["subway"])

ARRIVALS_PER_STOP = 3


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class Arrival(BaseModel):
    destination: str
    arrival: int | None
    minutes_away: int | None


class StopArrivals(BaseModel):
    stop_id: str
    stop_name: str
    line: str
    arrivals: list[Arrival]
    alerts: list[str]


class ArrivalsResponse(BaseModel):
    stops: list[StopArrivals]


class Segment(BaseModel):
    is_station: bool
    station_name: str
    no_service_north: bool
    no_service_south: bool
    has_train_north: bool
    has_train_south: bool


class LineStateResponse(BaseModel):
    line: str
    segments: list[Segment]
    alerts: list[str]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/arrivals", response_model=ArrivalsResponse, summary="Next trains at configured stops")
async def get_arrivals(services: Annotated[Services, Depends(get_services)]) -> ArrivalsResponse:
    now = datetime.now(timezone.utc)
    directory = services.subway.directory
    stops: list[StopArrivals] = []

    for stop_id in services.settings.subway_stop_ids:
        updates, alerts = await services.subway.get_next_arrivals(stop_id, ARRIVALS_PER_STOP)
        stops.append(
            StopArrivals(
                stop_id=stop_id,
                stop_name=directory.get(stop_id).name,
                line=stop_id[:1],
                arrivals=[
                    Arrival(
                        destination=u.destination.name,
                        arrival=u.arrival,
                        minutes_away=minutes_until(u.arrival, now) if u.arrival is not None else None,
                    )
                    for u in updates
                ],
                alerts=[a.header for a in alerts if a.header],
            )
        )

    return ArrivalsResponse(stops=stops)


@router.get("/line", response_model=LineStateResponse, summary="Train positions along a line")
async def get_line(
    services: Annotated[Services, Depends(get_services)],
    line: Annotated[str, Query(min_length=1, max_length=1, description="Line name, e.g. L")] = "L",
) -> LineStateResponse:
    state = await services.subway.get_line_state(TrainLine.parse(line))
    return LineStateResponse(
        line=state.line.value,
        segments=[
            Segment(
                is_station=s.is_station,
                station_name=s.station_name,
                no_service_north=s.no_service_north,
                no_service_south=s.no_service_south,
                has_train_north=s.has_train_north,
                has_train_south=s.has_train_south,
            )
            for s in state.segments
        ],
        alerts=state.alerts,
    )
