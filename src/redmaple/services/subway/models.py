"""Subway domain types: stops, decoded feed entities and derived display state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Direction bitmask values for Stop.trains_stopping
TRAINS_NOT_STOPPING = 0
TRAINS_STOPPING_NORTH = 1
TRAINS_STOPPING_SOUTH = 2

ROOT_STATION_TYPE = "1"

MTA_FEED_BASE = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds/nyct%2F"


class TrainLine(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    J = "J"
    L = "L"
    M = "M"
    N = "N"
    Q = "Q"
    R = "R"
    S = "S"
    W = "W"
    Z = "Z"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    UNKNOWN = ""

    @classmethod
    def parse(cls, value: str) -> TrainLine:
        """Parse a line name case-insensitively, returning UNKNOWN on miss."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


FEED_URLS: dict[TrainLine, str] = {
    TrainLine.G: MTA_FEED_BASE + "gtfs-g",
    TrainLine.L: MTA_FEED_BASE + "gtfs-l",
    TrainLine.A: MTA_FEED_BASE + "gtfs-ace",
    TrainLine.C: MTA_FEED_BASE + "gtfs-ace",
    TrainLine.E: MTA_FEED_BASE + "gtfs-ace",
    TrainLine.B: MTA_FEED_BASE + "gtfs-bdfm",
    TrainLine.D: MTA_FEED_BASE + "gtfs-bdfm",
    TrainLine.F: MTA_FEED_BASE + "gtfs-bdfm",
    TrainLine.M: MTA_FEED_BASE + "gtfs-bdfm",
    TrainLine.J: MTA_FEED_BASE + "gtfs-jz",
    TrainLine.Z: MTA_FEED_BASE + "gtfs-jz",
    TrainLine.N: MTA_FEED_BASE + "gtfs-nqrw",
    TrainLine.Q: MTA_FEED_BASE + "gtfs-nqrw",
    TrainLine.R: MTA_FEED_BASE + "gtfs-nqrw",
    TrainLine.W: MTA_FEED_BASE + "gtfs-nqrw",
    TrainLine.ONE: MTA_FEED_BASE + "gtfs",
    TrainLine.TWO: MTA_FEED_BASE + "gtfs",
    TrainLine.THREE: MTA_FEED_BASE + "gtfs",
    TrainLine.FOUR: MTA_FEED_BASE + "gtfs",
    TrainLine.FIVE: MTA_FEED_BASE + "gtfs",
    TrainLine.SIX: MTA_FEED_BASE + "gtfs",
    TrainLine.SEVEN: MTA_FEED_BASE + "gtfs",
    # TODO: the shuttles are split across three feeds (gtfs, gtfs-ace, gtfs-bdfm)
    TrainLine.S: MTA_FEED_BASE + "gtfs",
}


def stop_id_to_line(stop_id: str) -> TrainLine:
    """Map a stop id such as ``L03S`` to the line whose feed carries it."""
    if not stop_id:
        return TrainLine.UNKNOWN
    return TrainLine.parse(stop_id[0])


@dataclass(frozen=True)
class Stop:
    """A row of the stop directory. The default instance is the "unknown stop"."""

    id: str = ""
    name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    location_type: str = ""
    parent_station: str = ""
    trains_stopping: int = TRAINS_NOT_STOPPING

    @property
    def is_root_station(self) -> bool:
        return self.location_type == ROOT_STATION_TYPE


# ---------------------------------------------------------------------------
# Decoded feed entities
# ---------------------------------------------------------------------------


class VehicleStopStatus(int, Enum):
    INCOMING_AT = 0
    STOPPED_AT = 1
    IN_TRANSIT_TO = 2


@dataclass(frozen=True)
class StopTimeUpdate:
    stop_id: str
    arrival: int | None = None
    departure: int | None = None


@dataclass(frozen=True)
class TripUpdate:
    trip_id: str
    route_id: str
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()


@dataclass(frozen=True)
class VehiclePosition:
    stop_id: str
    current_status: VehicleStopStatus = VehicleStopStatus.IN_TRANSIT_TO
    trip_id: str = ""

    @property
    def is_at_stop(self) -> bool:
        return self.current_status == VehicleStopStatus.STOPPED_AT


@dataclass(frozen=True)
class Alert:
    header_text: tuple[str, ...] = ()
    description_text: tuple[str, ...] = ()

    @property
    def header(self) -> str:
        return self.header_text[0] if self.header_text else ""

    @property
    def description(self) -> str:
        """First translation of the description; feeds repeat it per language."""
        return self.description_text[0] if self.description_text else ""


EntityPayload = TripUpdate | VehiclePosition | Alert


@dataclass(frozen=True)
class FeedEntity:
    """One decoded feed entity; ``payload`` is None for a bare deleted marker."""

    id: str
    payload: EntityPayload | None = None
    is_deleted: bool = False


# ---------------------------------------------------------------------------
# Derived display state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StopUpdate:
    """The next visit of one trip to the target stop."""

    stop: Stop
    arrival: int | None
    departure: int | None
    destination: Stop


@dataclass(frozen=True)
class TrainUpdate:
    next_stop: Stop
    is_at_stop: bool


@dataclass
class LineSegment:
    """A station, or the gap between two stations.

    On a station ``has_train_*`` means a train is stopped there; on a gap it
    means a train is approaching through it.
    """

    is_station: bool = False
    station_name: str = ""
    no_service_north: bool = False
    no_service_south: bool = False
    has_train_north: bool = False
    has_train_south: bool = False


@dataclass
class LineState:
    line: TrainLine
    segments: list[LineSegment] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
