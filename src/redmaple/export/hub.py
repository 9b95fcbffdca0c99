"""Periodic export loop that fans provider data out to exporters."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from redmaple.logging import get_logger

if TYPE_CHECKING:
    from redmaple.export.types import DataPoint, Exporter, Provider

logger = get_logger(__name__)

DEFAULT_INTERVAL_SEC = 60.0


class ExportHub:
    """Collects a data point from every provider and hands the batch to exporters.

    Usage:
        hub = ExportHub(interval_sec=60)
        hub.add_provider(weather.get_provider(), name="weather")
        hub.add_exporter(LogExporter())
        await hub.start()   # first cycle runs immediately
        await hub.stop()    # lets an in-flight cycle finish

        # Or run a single export cycle:
        report = await hub.run_once()

    A failing provider or exporter is logged and skipped; nothing raised by
    either escapes a cycle.
    """

    def __init__(self, interval_sec: float = DEFAULT_INTERVAL_SEC) -> None:
        if interval_sec <= 0:
            msg = f"interval_sec must be > 0, got {interval_sec}"
            raise ValueError(msg)
        self._interval = interval_sec
        self._providers: list[tuple[str, Provider]] = []
        self._exporters: list[Exporter] = []

        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._cycle_count = 0
        self._last_cycle_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def last_cycle_at(self) -> datetime | None:
        return self._last_cycle_at

    @property
    def provider_names(self) -> list[str]:
        return [name for name, _ in self._providers]

    def add_provider(self, provider: Provider, name: str | None = None) -> None:
        self._providers.append((name or f"provider-{len(self._providers)}", provider))

    def add_exporter(self, exporter: Exporter) -> None:
        self._exporters.append(exporter)

    async def start(self) -> None:
        """Start the background export loop."""
        if self.is_running:
            logger.warning("Export hub already running, ignoring start request")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        logger.info(
            "Export hub started",
            interval_sec=self._interval,
            providers=len(self._providers),
            exporters=len(self._exporters),
        )

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the current cycle to finish."""
        if self._task is None:
            return

        if self._stop_event is not None:
            self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        logger.info("Export hub stopped")

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run export cycles until ``stop_event`` is set.

        The first cycle fires immediately; each following one waits for the
        interval or for the stop request, whichever comes first.
        """
        while not stop_event.is_set():
            try:
                await self.run_once()
            except Exception as exc:
                logger.error("Export cycle failed unexpectedly", exc_info=exc)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except TimeoutError:
                continue

    async def run_once(self) -> dict[str, Any]:
        """Execute one export cycle.

        Returns:
            Report dict with provider and exporter outcomes.
        """
        cycle_id = str(uuid.uuid4())[:8]
        self._cycle_count += 1
        self._last_cycle_at = datetime.now(timezone.utc)

        report: dict[str, Any] = {
            "cycle_id": cycle_id,
            "cycle_count": self._cycle_count,
            "started_at": self._last_cycle_at.isoformat(),
            "points": 0,
            "provider_errors": {},
            "exporter_errors": {},
            "exported": False,
        }

        if not self._providers:
            logger.debug("No data providers registered, skipping export", cycle_id=cycle_id)
            return report

        points = await self._collect(cycle_id, report)
        report["points"] = len(points)

        for exporter in self._exporters:
            exporter_name = type(exporter).__name__
            try:
                await exporter.export(list(points))
            except Exception as exc:
                report["exporter_errors"][exporter_name] = str(exc)
                logger.error(
                    "Failed to export data",
                    cycle_id=cycle_id,
                    exporter=exporter_name,
                    error=str(exc),
                )
        report["exported"] = bool(self._exporters)

        logger.debug(
            "Export cycle complete",
            cycle_id=cycle_id,
            points=len(points),
            provider_errors=len(report["provider_errors"]),
            exporter_errors=len(report["exporter_errors"]),
        )
        return report

    async def get_status(self) -> dict[str, Any]:
        """Get current hub status for the health endpoint."""
        return {
            "running": self.is_running,
            "cycle_count": self._cycle_count,
            "last_cycle_at": self._last_cycle_at.isoformat() if self._last_cycle_at else None,
            "interval_sec": self._interval,
            "providers": self.provider_names,
            "exporters": [type(e).__name__ for e in self._exporters],
        }

    async def _collect(self, cycle_id: str, report: dict[str, Any]) -> list[DataPoint]:
        points: list[DataPoint] = []
        for name, provider in self._providers:
            try:
                point = await provider()
            except Exception as exc:
                report["provider_errors"][name] = str(exc)
                logger.warning(
                    "Data provider failed",
                    cycle_id=cycle_id,
                    provider=name,
                    error=str(exc),
                )
                continue
            points.append(point)
        return points
