"""Subway client: cached per-line feeds and the derivations built on them."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from redmaple.cache import TtlCache
from redmaple.errors import NotFound
from redmaple.logging import get_logger
from redmaple.services.fetcher import HttpFetcher
from redmaple.services.subway import arrivals, line_state
from redmaple.services.subway.decoder import FeedDecoder
from redmaple.services.subway.models import (
    FEED_URLS,
    LineState,
    TrainLine,
    stop_id_to_line,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from redmaple.services.subway.models import Alert, FeedEntity, Stop, StopUpdate, TrainUpdate
    from redmaple.services.subway.stops import StopDirectory

logger = get_logger(__name__)

DEFAULT_FEED_TTL_SEC = 60


class SubwayClient:
    """Fetches MTA GTFS-RT feeds and derives arrivals and line state.

    Feeds are cached per line; several lines share one upstream feed URL but
    are cached independently.
    """

    def __init__(
        self,
        directory: StopDirectory,
        *,
        fetcher: HttpFetcher | None = None,
        feed_urls: dict[TrainLine, str] | None = None,
        api_key: str = "",
        feed_ttl_sec: float = DEFAULT_FEED_TTL_SEC,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.directory = directory
        self._fetcher = fetcher or HttpFetcher()
        self._feed_urls = feed_urls if feed_urls is not None else dict(FEED_URLS)
        self._api_key = api_key
        self._feeds: TtlCache[list[FeedEntity]] = TtlCache(
            self._fetch_feed,
            ttl=feed_ttl_sec,
            clock=clock or time.monotonic,
            name="subway",
        )

    async def get_feed(self, line: TrainLine) -> list[FeedEntity]:
        """Return the decoded feed for ``line``.

        Raises:
            NotFound: If no feed URL is known for the line.
            FetchFailure: If the feed cannot be downloaded.
            DecodeFailure: If the payload is not a valid GTFS-RT message.
        """
        if line not in self._feed_urls:
            msg = f"No feed configured for line {line.value or '?'}"
            raise NotFound(msg)
        return await self._feeds.get(line.value)

    async def get_trips_at_stop(self, stop_id: str) -> tuple[list[StopUpdate], list[Alert]]:
        """Trips visiting ``stop_id`` (feed order) and the line's alerts."""
        entities = await self.get_feed(stop_id_to_line(stop_id))
        updates, alerts = arrivals.trips_at_stop(entities, stop_id, self.directory)
        if not updates:
            logger.warning("No trips found", stop_id=stop_id)
        return updates, alerts

    async def get_next_arrivals(self, stop_id: str, count: int = 3) -> tuple[list[StopUpdate], list[Alert]]:
        """The ``count`` soonest trips at ``stop_id``, sorted by arrival."""
        updates, alerts = await self.get_trips_at_stop(stop_id)
        return arrivals.soonest(updates, count), alerts

    async def get_trains(self, line: TrainLine) -> tuple[list[TrainUpdate], list[Alert]]:
        entities = await self.get_feed(line)
        return line_state.trains(entities, self.directory)

    async def get_stops_on_line(self, line: TrainLine) -> list[Stop]:
        entities = await self.get_feed(line)
        return line_state.stops_on_line(entities, self.directory, line)

    async def get_line_state(self, line: TrainLine) -> LineState:
        entities = await self.get_feed(line)
        segments, alerts = line_state.line_state(entities, self.directory, line)
        return LineState(line=line, segments=segments, alerts=alerts)

    async def _fetch_feed(self, line_key: str) -> list[FeedEntity]:
        line = TrainLine(line_key)
        headers = {"x-api-key": self._api_key} if self._api_key else None
        data = await self._fetcher.fetch(
            self._feed_urls[line],
            source=f"subway:{line.value}",
            headers=headers,
        )
        return FeedDecoder.decode(data)
