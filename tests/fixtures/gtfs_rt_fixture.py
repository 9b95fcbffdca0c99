"""Test fixtures for GTFS-RT protobuf data."""

from __future__ import annotations

import time
from typing import Any

from google.transit import gtfs_realtime_pb2

from redmaple.services.subway.stops import StopDirectory

STOPS_TXT = """stop_id,stop_name,stop_lat,stop_lon,location_type,parent_station
L01,8 Av,40.739777,-74.002578,1,
L01N,8 Av,40.739777,-74.002578,,L01
L01S,8 Av,40.739777,-74.002578,,L01
L02,6 Av,40.737335,-73.996786,1,
L02N,6 Av,40.737335,-73.996786,,L02
L02S,6 Av,40.737335,-73.996786,,L02
L03,14 St-Union Sq,40.734789,-73.990730,1,
L03N,14 St-Union Sq,40.734789,-73.990730,,L03
L03S,14 St-Union Sq,40.734789,-73.990730,,L03
L05,3 Av,40.732849,-73.986122,1,
L05N,3 Av,40.732849,-73.986122,,L05
L05S,3 Av,40.732849,-73.986122,,L05
L06,1 Av,40.730953,-73.981628,1,
L06N,1 Av,40.730953,-73.981628,,L06
L06S,1 Av,40.730953,-73.981628,,L06
G29,Metropolitan Av,40.712792,-73.951418,1,
G29N,Metropolitan Av,40.712792,-73.951418,,G29
G29S,Metropolitan Av,40.712792,-73.951418,,G29
"""


def build_directory(text: str = STOPS_TXT) -> StopDirectory:
    """Stop directory with five L stations (L01, L02, L03, L05, L06) and G29."""
    return StopDirectory.from_text(text)


def _new_feed(feed_timestamp: int | None = None) -> gtfs_realtime_pb2.FeedMessage:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = feed_timestamp or int(time.time())
    return feed


def add_trip_update(
    feed: gtfs_realtime_pb2.FeedMessage,
    trip_id: str,
    stop_times: list[tuple[str, int]],
    route_id: str = "L",
    is_deleted: bool = False,
) -> None:
    """Append a TripUpdate entity.

    Args:
        feed: Message to extend.
        trip_id: The trip identifier.
        stop_times: ``(stop_id, arrival_time)`` pairs in travel order. An
            arrival time of 0 leaves the arrival unset.
        route_id: The route identifier.
        is_deleted: Mark the entity as deleted.
    """
    entity = feed.entity.add()
    entity.id = f"tu_{trip_id}"
    entity.is_deleted = is_deleted
    tu = entity.trip_update
    tu.trip.trip_id = trip_id
    tu.trip.route_id = route_id
    for stop_id, arrival in stop_times:
        stu = tu.stop_time_update.add()
        stu.stop_id = stop_id
        if arrival:
            stu.arrival.time = arrival
            stu.departure.time = arrival + 30


def add_vehicle(
    feed: gtfs_realtime_pb2.FeedMessage,
    vehicle_id: str,
    stop_id: str,
    stopped: bool,
    trip_id: str = "",
    is_deleted: bool = False,
) -> None:
    """Append a VehiclePosition entity, stopped at or in transit to ``stop_id``."""
    entity = feed.entity.add()
    entity.id = f"vp_{vehicle_id}"
    entity.is_deleted = is_deleted
    vp = entity.vehicle
    vp.stop_id = stop_id
    vp.current_status = (
        gtfs_realtime_pb2.VehiclePosition.STOPPED_AT
        if stopped
        else gtfs_realtime_pb2.VehiclePosition.IN_TRANSIT_TO
    )
    if trip_id:
        vp.trip.trip_id = trip_id


def add_alert(
    feed: gtfs_realtime_pb2.FeedMessage,
    alert_id: str,
    header: str = "Delays on the L",
    description: str = "Trains are running with delays.",
    languages: tuple[str, ...] = ("en",),
) -> None:
    """Append an Alert entity with one translation per language."""
    entity = feed.entity.add()
    entity.id = alert_id
    alert = entity.alert
    for language in languages:
        hs = alert.header_text.translation.add()
        hs.text = header if language == "en" else f"[{language}] {header}"
        hs.language = language
        ds = alert.description_text.translation.add()
        ds.text = description if language == "en" else f"[{language}] {description}"
        ds.language = language


def build_feed(
    trips: list[dict[str, Any]] | None = None,
    vehicles: list[dict[str, Any]] | None = None,
    alerts: list[dict[str, Any]] | None = None,
    feed_timestamp: int | None = None,
) -> bytes:
    """Build a serialized FeedMessage from keyword dicts.

    Each dict is passed as keyword arguments to ``add_trip_update``,
    ``add_vehicle`` or ``add_alert`` respectively.

    Returns:
        Serialized protobuf bytes.
    """
    feed = _new_feed(feed_timestamp)
    for trip in trips or []:
        add_trip_update(feed, **trip)
    for vehicle in vehicles or []:
        add_vehicle(feed, **vehicle)
    for alert in alerts or []:
        add_alert(feed, **alert)
    return feed.SerializeToString()


def build_empty_feed(feed_timestamp: int | None = None) -> bytes:
    """Build a valid FeedMessage with no entities."""
    return _new_feed(feed_timestamp).SerializeToString()


def build_invalid_bytes() -> bytes:
    """Return bytes that are not a valid protobuf message."""
    return b"not a protobuf"
