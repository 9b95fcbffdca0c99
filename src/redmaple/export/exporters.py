"""Exporter implementations: structured log output and InfluxDB v3."""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING

import urllib3
from influxdb_client_3 import InfluxDBClient3, InfluxDBError, Point, WritePrecision

from redmaple.errors import FetchFailure
from redmaple.logging import get_logger

if TYPE_CHECKING:
    from redmaple.export.types import DataPoint

logger = get_logger(__name__)

WRITE_PRECISION = "s"


class LogExporter:
    """Writes every data point to the application log."""

    async def export(self, points: list[DataPoint]) -> None:
        for point in points:
            logger.info(
                "Data point",
                table=point.table,
                tags=point.tags,
                fields=point.fields,
                stamp=point.stamp.isoformat(),
            )


def to_point(point: DataPoint) -> Point | None:
    """Build an InfluxDB ``Point`` stamped to the second.

    Empty tag values and non-finite floats are left out. Returns None when no
    writable field remains, since such a point cannot be written.
    """
    record = Point(point.table)
    for key, value in point.tags.items():
        if value != "":
            record.tag(key, value)

    written = 0
    for key, value in point.fields.items():
        if isinstance(value, float) and not math.isfinite(value):
            logger.debug("Dropping non-finite field", table=point.table, field=key)
            continue
        record.field(key, value)
        written += 1

    if not written:
        return None
    return record.time(point.stamp, WritePrecision.S)


class InfluxDBExporter:
    """Writes batches to an InfluxDB 3 database through ``influxdb3-python``.

    Usage:
        exporter = InfluxDBExporter("http://localhost:8181", token, "redmaple")
        await exporter.export(points)
    """

    def __init__(self, endpoint: str, token: str, database: str) -> None:
        if not endpoint or not database:
            msg = "InfluxDB exporter needs an endpoint and a database"
            raise ValueError(msg)
        self.endpoint = endpoint.rstrip("/")
        self.database = database
        self._token = token

    async def export(self, points: list[DataPoint]) -> None:
        """Write ``points`` in a single call. An empty batch is a no-op.

        Raises:
            FetchFailure: If the server is unreachable or rejects the write.
        """
        records: list[Point] = []
        for point in points:
            record = to_point(point)
            if record is None:
                logger.warning("Skipping data point without fields", table=point.table)
                continue
            records.append(record)
        if not records:
            return

        try:
            # The client writes synchronously; keep it off the event loop.
            await asyncio.to_thread(self._write, records)
        except (InfluxDBError, urllib3.exceptions.HTTPError) as exc:
            msg = f"Failed to write {len(records)} points to InfluxDB"
            logger.error(msg, database=self.database, error=str(exc))
            raise FetchFailure(msg) from exc

        logger.debug("Wrote points to InfluxDB", database=self.database, points=len(records))

    def _write(self, records: list[Point]) -> None:
        client = InfluxDBClient3(host=self.endpoint, token=self._token, database=self.database)
        try:
            client.write(record=records, write_precision=WRITE_PRECISION)
        finally:
            client.close()
