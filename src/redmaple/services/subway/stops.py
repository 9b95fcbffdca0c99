"""Static stop directory loaded from the MTA stops.txt reference table."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

from redmaple.errors import ConfigurationError, NotFound
from redmaple.logging import get_logger
from redmaple.services.subway.models import Stop

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

logger = get_logger(__name__)

# stop_id,stop_name,stop_lat,stop_lon,location_type,parent_station
EXPECTED_FIELD_COUNT = 6


class StopDirectory:
    """Read-only mapping of stop id to Stop.

    ``get`` is total: an unknown id yields the zero-value ``Stop()`` so feed
    entries that reference unmapped stops never fail a derivation.
    """

    def __init__(self, stops: Iterable[Stop] = ()) -> None:
        self._stops: dict[str, Stop] = {stop.id: stop for stop in stops}

    @classmethod
    def from_path(cls, path: Path) -> StopDirectory:
        """Load the directory from a stops.txt file.

        Raises:
            ConfigurationError: If the file is missing or any row is malformed.
        """
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            msg = f"Cannot read stop directory {path}"
            raise ConfigurationError(msg) from exc
        directory = cls.from_text(text)
        logger.info("Stop directory loaded", path=str(path), stop_count=len(directory))
        return directory

    @classmethod
    def from_text(cls, text: str) -> StopDirectory:
        """Parse comma separated stop rows, skipping the header row.

        Raises:
            ConfigurationError: If a row does not have exactly six fields or
                carries unparsable coordinates.
        """
        return cls(_parse_rows(csv.reader(io.StringIO(text))))

    def get(self, stop_id: str) -> Stop:
        return self._stops.get(stop_id, Stop())

    def find_by_name(self, name: str) -> Stop:
        """Return the first root station called ``name``.

        Raises:
            NotFound: If no root station has that name.
        """
        for stop in self._stops.values():
            if stop.name == name and stop.is_root_station:
                return stop
        msg = f"Station not found: {name}"
        raise NotFound(msg)

    def stops_with_prefix(self, prefix: str) -> list[Stop]:
        return [stop for stop in self._stops.values() if stop.id.startswith(prefix)]

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self._stops

    def __iter__(self) -> Iterator[Stop]:
        return iter(self._stops.values())

    def __len__(self) -> int:
        return len(self._stops)


def _parse_rows(rows: Iterable[list[str]]) -> Iterator[Stop]:
    for line_no, row in enumerate(rows, start=1):
        if line_no == 1:
            continue
        if not row:
            continue
        if len(row) != EXPECTED_FIELD_COUNT:
            msg = f"Malformed stops.txt at line {line_no}: expected {EXPECTED_FIELD_COUNT} fields, got {len(row)}"
            raise ConfigurationError(msg)

        stop_id, name, lat, lon, location_type, parent_station = row
        try:
            latitude = float(lat)
            longitude = float(lon)
        except ValueError as exc:
            msg = f"Malformed coordinates in stops.txt at line {line_no}: {lat!r}, {lon!r}"
            raise ConfigurationError(msg) from exc

        yield Stop(
            id=stop_id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            location_type=location_type,
            parent_station=parent_station,
        )
