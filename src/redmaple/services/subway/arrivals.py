"""Upcoming arrivals at a single stop."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from redmaple.services.subway.models import Alert, StopUpdate, TripUpdate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from redmaple.services.subway.models import FeedEntity
    from redmaple.services.subway.stops import StopDirectory


def trips_at_stop(
    entities: Iterable[FeedEntity],
    stop_id: str,
    directory: StopDirectory,
) -> tuple[list[StopUpdate], list[Alert]]:
    """Collect every trip that visits ``stop_id`` plus the feed's alerts.

    Results are in feed order, which is not guaranteed to be arrival order;
    use ``soonest`` to pick the next N trains. The destination of each update
    is the trip's final stop-time entry, resolved through the directory (an
    unmapped stop resolves to the empty ``Stop()``).

    Returns:
        Tuple of (stop updates, alerts).
    """
    updates: list[StopUpdate] = []
    alerts: list[Alert] = []
    stop = directory.get(stop_id)

    for entity in entities:
        if entity.is_deleted:
            continue
        payload = entity.payload
        if isinstance(payload, Alert):
            alerts.append(payload)
            continue
        if not isinstance(payload, TripUpdate) or not payload.stop_time_updates:
            continue

        match = None
        for stu in payload.stop_time_updates:
            if stu.stop_id == stop_id:
                match = stu
        if match is None:
            continue

        last = payload.stop_time_updates[-1]
        updates.append(
            StopUpdate(
                stop=stop,
                arrival=match.arrival,
                departure=match.departure,
                destination=directory.get(last.stop_id),
            )
        )

    return updates, alerts


def soonest(updates: Iterable[StopUpdate], count: int) -> list[StopUpdate]:
    """Return the ``count`` updates with the earliest arrival time.

    Updates without an arrival time sort last. The sort is stable, so ties
    keep feed order.
    """
    ordered = sorted(
        updates,
        key=lambda u: u.arrival if u.arrival is not None else sys.maxsize,
    )
    return ordered[:count]
