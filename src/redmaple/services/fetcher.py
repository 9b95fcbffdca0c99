"""HTTP fetcher with retry and backoff, shared by every source client."""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any

import httpx

from redmaple.errors import DecodeFailure, FetchFailure
from redmaple.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 10
DEFAULT_MAX_RETRIES = 1
DEFAULT_BACKOFF_BASE = 2.0


class HttpFetcher:
    """Fetches raw payloads from remote URLs.

    Transport errors, HTTP status >= 400 and empty bodies are retried with
    exponential backoff and finally surface as ``FetchFailure``.
    """

    def __init__(
        self,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
    ) -> None:
        self.timeout_sec = timeout_sec
        self.max_retries = max(1, max_retries)
        self.backoff_base = backoff_base

    async def fetch(
        self,
        url: str,
        *,
        source: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Download ``url`` and return the response body.

        Args:
            url: Full URL to fetch.
            source: Label for logging (e.g. "subway:L").
            headers: Extra request headers.
            params: Query string parameters.

        Raises:
            FetchFailure: If all attempts fail.
        """
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                logger.debug(
                    "Fetching source",
                    source=source,
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                )
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout_sec),
                    follow_redirects=True,
                ) as client:
                    response = await client.get(url, headers=headers, params=params)
                    raise_result = response.raise_for_status()
                    if inspect.isawaitable(raise_result):
                        await raise_result
                    data = response.content

                if not data:
                    msg = "Empty response body"
                    raise FetchFailure(msg)

                logger.debug("Source downloaded", source=source, size_bytes=len(data))
                return data

            except (httpx.HTTPStatusError, httpx.RequestError, FetchFailure) as exc:
                last_error = exc
                if attempt < self.max_retries - 1:
                    delay = self.backoff_base ** (attempt + 1)
                    logger.warning(
                        "Fetch failed, retrying",
                        source=source,
                        attempt=attempt + 1,
                        delay_sec=delay,
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)

        msg = f"Failed to fetch {source} after {self.max_retries} attempts"
        logger.error(msg, source=source, error=str(last_error))
        raise FetchFailure(msg) from last_error

    async def fetch_json(
        self,
        url: str,
        *,
        source: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Download ``url`` and parse the body as JSON.

        Raises:
            FetchFailure: If all attempts fail.
            DecodeFailure: If the body is not valid JSON.
        """
        data = await self.fetch(url, source=source, headers=headers, params=params)
        try:
            return json.loads(data)
        except ValueError as exc:
            msg = f"Invalid JSON from {source}"
            logger.error(msg, source=source, error=str(exc))
            raise DecodeFailure(msg) from exc
