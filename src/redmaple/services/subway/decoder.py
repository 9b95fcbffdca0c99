"""GTFS-RT protobuf decode layer."""

from __future__ import annotations

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from redmaple.errors import DecodeFailure
from redmaple.logging import get_logger
from redmaple.services.subway.models import (
    Alert,
    EntityPayload,
    FeedEntity,
    StopTimeUpdate,
    TripUpdate,
    VehiclePosition,
    VehicleStopStatus,
)

logger = get_logger(__name__)


def _translations(translated_string: gtfs_realtime_pb2.TranslatedString) -> tuple[str, ...]:
    return tuple(str(t.text) for t in translated_string.translation if t.text)


def _event_time(stu: gtfs_realtime_pb2.TripUpdate.StopTimeUpdate, name: str) -> int | None:
    if not stu.HasField(name):
        return None
    event = getattr(stu, name)
    return event.time if event.HasField("time") else None


class FeedDecoder:
    """Decodes raw protobuf bytes into typed feed entities."""

    @staticmethod
    def parse(data: bytes) -> gtfs_realtime_pb2.FeedMessage:
        """Parse bytes into a FeedMessage.

        Raises:
            DecodeFailure: If protobuf parsing fails.
        """
        feed = gtfs_realtime_pb2.FeedMessage()
        try:
            feed.ParseFromString(data)
        except DecodeError as exc:
            msg = "Failed to decode GTFS-RT feed"
            logger.error(msg, size_bytes=len(data), error=str(exc))
            raise DecodeFailure(msg) from exc
        return feed

    @classmethod
    def decode(cls, data: bytes) -> list[FeedEntity]:
        """Decode protobuf bytes into a list of FeedEntity, in feed order.

        Deleted entities are kept (flagged) so callers can see retractions;
        every derivation skips them.

        Raises:
            DecodeFailure: If protobuf parsing fails.
        """
        feed = cls.parse(data)
        entities = [cls._convert(entity) for entity in feed.entity]
        logger.debug(
            "GTFS-RT feed decoded",
            entity_count=len(entities),
            feed_timestamp=cls.feed_timestamp(feed),
        )
        return entities

    @staticmethod
    def feed_timestamp(feed: gtfs_realtime_pb2.FeedMessage) -> int:
        """Header timestamp in unix seconds, or 0 if not set."""
        return feed.header.timestamp if feed.header.timestamp else 0

    @staticmethod
    def _convert(entity: gtfs_realtime_pb2.FeedEntity) -> FeedEntity:
        payload: EntityPayload | None = None

        if entity.HasField("alert"):
            alert = entity.alert
            payload = Alert(
                header_text=_translations(alert.header_text),
                description_text=_translations(alert.description_text),
            )
        elif entity.HasField("trip_update"):
            tu = entity.trip_update
            payload = TripUpdate(
                trip_id=tu.trip.trip_id,
                route_id=tu.trip.route_id,
                stop_time_updates=tuple(
                    StopTimeUpdate(
                        stop_id=stu.stop_id,
                        arrival=_event_time(stu, "arrival"),
                        departure=_event_time(stu, "departure"),
                    )
                    for stu in tu.stop_time_update
                ),
            )
        elif entity.HasField("vehicle"):
            vp = entity.vehicle
            try:
                status = VehicleStopStatus(vp.current_status)
            except ValueError:
                status = VehicleStopStatus.IN_TRANSIT_TO
            payload = VehiclePosition(
                stop_id=vp.stop_id,
                current_status=status,
                trip_id=vp.trip.trip_id if vp.HasField("trip") else "",
            )

        return FeedEntity(id=entity.id, payload=payload, is_deleted=entity.is_deleted)
