"""Data point and the provider/exporter contracts consumed by the export hub."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

LOCATION_TAG = "location"


@dataclass
class DataPoint:
    """One export record: a table name, tags, fields and a capture time."""

    table: str
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, Any] = field(default_factory=dict)
    stamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Provider = Callable[[], Awaitable[DataPoint]]


@runtime_checkable
class Exporter(Protocol):
    """A sink that accepts one batch of data points per export cycle."""

    async def export(self, points: list[DataPoint]) -> None: ...
