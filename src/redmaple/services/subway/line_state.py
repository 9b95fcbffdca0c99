"""Station-by-station train presence for a whole line.

The output is an ordered list of segments, one gap before every station and
one trailing gap::

    gap0  station0  gap1  station1  ...  gapN-1  stationN-1  gapN

Stations are sorted by the numeric part of their id. Southbound trains travel
from the start of the list towards the end and northbound trains the other
way, so a train *approaching* a station sits in a different gap depending on
its direction:

    southbound, in transit to station k  ->  gap k     (just before station k)
    northbound, in transit to station k  ->  gap k+1   (just after station k)

During the walk gap k is built together with station k, so a northbound
approach found while scanning station k is carried over to the next
iteration, while a southbound approach marks the gap being built right now.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from redmaple.services.subway.models import (
    TRAINS_STOPPING_NORTH,
    TRAINS_STOPPING_SOUTH,
    Alert,
    LineSegment,
    Stop,
    TrainLine,
    TrainUpdate,
    TripUpdate,
    VehiclePosition,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from redmaple.services.subway.models import FeedEntity
    from redmaple.services.subway.stops import StopDirectory


def _direction_bit(stop_id: str) -> int:
    if stop_id.endswith("N"):
        return TRAINS_STOPPING_NORTH
    if stop_id.endswith("S"):
        return TRAINS_STOPPING_SOUTH
    return 0


def _numeric_suffix(stop_id: str) -> int:
    try:
        return int(stop_id[1:])
    except ValueError:
        return 0


def stops_on_line(
    entities: Iterable[FeedEntity],
    directory: StopDirectory,
    line: TrainLine,
) -> list[Stop]:
    """Return the line's stops with ``trains_stopping`` filled from the feed.

    Platform stops (``L03N``) get the directions seen in trip updates for that
    exact platform id; root stops (``L03``) get the union of their two
    platforms. The directory itself is not modified.
    """
    stopping: dict[str, int] = {}
    for entity in entities:
        if entity.is_deleted or not isinstance(entity.payload, TripUpdate):
            continue
        for stu in entity.payload.stop_time_updates:
            bit = _direction_bit(stu.stop_id)
            if bit:
                stopping[stu.stop_id] = stopping.get(stu.stop_id, 0) | bit

    if not line.value:
        return []

    stops: list[Stop] = []
    for stop in directory.stops_with_prefix(line.value[0]):
        if _direction_bit(stop.id):
            mask = stopping.get(stop.id, 0)
        else:
            mask = stopping.get(stop.id + "N", 0) | stopping.get(stop.id + "S", 0)
        stops.append(dataclasses.replace(stop, trains_stopping=mask))
    return stops


def trains(
    entities: Iterable[FeedEntity],
    directory: StopDirectory,
) -> tuple[list[TrainUpdate], list[Alert]]:
    """Return every live vehicle's next stop plus the feed's alerts."""
    updates: list[TrainUpdate] = []
    alerts: list[Alert] = []
    for entity in entities:
        if entity.is_deleted:
            continue
        payload = entity.payload
        if isinstance(payload, Alert):
            alerts.append(payload)
        elif isinstance(payload, VehiclePosition):
            updates.append(
                TrainUpdate(next_stop=directory.get(payload.stop_id), is_at_stop=payload.is_at_stop)
            )
    return updates, alerts


def root_stations(stops: Iterable[Stop]) -> list[Stop]:
    """Root stations sorted by the integer after the line letter.

    ``L8`` sorts before ``L10``; a plain string sort would not.
    """
    stations = [stop for stop in stops if stop.is_root_station]
    stations.sort(key=lambda stop: _numeric_suffix(stop.id))
    return stations


def build_segments(stations: Sequence[Stop], train_updates: Sequence[TrainUpdate]) -> list[LineSegment]:
    """Walk the sorted stations and place every train on a segment.

    See the module docstring for why north and south approaches land on
    different gaps.
    """
    segments: list[LineSegment] = []
    next_gap_has_north_train = False

    for station in stations:
        gap = LineSegment()
        station_segment = LineSegment(
            is_station=True,
            station_name=station.name,
            no_service_north=(station.trains_stopping & TRAINS_STOPPING_NORTH) == 0,
            no_service_south=(station.trains_stopping & TRAINS_STOPPING_SOUTH) == 0,
        )

        if next_gap_has_north_train:
            gap.has_train_north = True
            next_gap_has_north_train = False

        for train in train_updates:
            next_stop_id = train.next_stop.id
            if not next_stop_id.startswith(station.id):
                continue
            if next_stop_id.endswith("N"):
                if train.is_at_stop:
                    station_segment.has_train_north = True
                else:
                    next_gap_has_north_train = True
            elif next_stop_id.endswith("S"):
                if train.is_at_stop:
                    station_segment.has_train_south = True
                else:
                    gap.has_train_south = True

        segments.append(gap)
        segments.append(station_segment)

    segments.append(LineSegment(has_train_north=next_gap_has_north_train))
    return segments


def line_state(
    entities: Sequence[FeedEntity],
    directory: StopDirectory,
    line: TrainLine,
) -> tuple[list[LineSegment], list[str]]:
    """Derive the display segments and alert texts for ``line``.

    Returns:
        Tuple of (segments, alert description strings). There are always
        ``2 * station_count + 1`` segments.
    """
    stations = root_stations(stops_on_line(entities, directory, line))
    train_updates, alerts = trains(entities, directory)
    segments = build_segments(stations, train_updates)
    return segments, [alert.description for alert in alerts]
