"""Tests for the shared HTTP fetcher."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from redmaple.errors import DecodeFailure, FetchFailure
from redmaple.services.fetcher import HttpFetcher


def _mock_client(mock_client: AsyncMock, response: AsyncMock) -> AsyncMock:
    instance = AsyncMock()
    instance.get = AsyncMock(return_value=response)
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    mock_client.return_value = instance
    return instance


def _ok_response(content: bytes) -> AsyncMock:
    response = AsyncMock()
    response.content = content
    response.raise_for_status = lambda: None
    return response


def _error_response(status: int) -> AsyncMock:
    response = AsyncMock()
    response.status_code = status
    response.raise_for_status = AsyncMock(
        side_effect=httpx.HTTPStatusError(
            "Server Error",
            request=httpx.Request("GET", "https://example.com/feed"),
            response=httpx.Response(status),
        )
    )
    return response


class TestHttpFetcher:
    """Unit tests for HttpFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_success(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=1)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, _ok_response(b"payload"))
            data = await fetcher.fetch(
                "https://example.com/feed",
                source="test",
                headers={"x-api-key": "k"},
                params={"a": 1},
            )

        assert data == b"payload"
        instance.get.assert_awaited_once_with(
            "https://example.com/feed",
            headers={"x-api-key": "k"},
            params={"a": 1},
        )

    @pytest.mark.asyncio
    async def test_fetch_empty_response_raises(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=1)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _ok_response(b""))
            with pytest.raises(FetchFailure):
                await fetcher.fetch("https://example.com/feed", source="test")

    @pytest.mark.asyncio
    async def test_fetch_http_error_retries(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=2, backoff_base=0.01)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, _error_response(500))
            with pytest.raises(FetchFailure, match="Failed to fetch"):
                await fetcher.fetch("https://example.com/feed", source="test")

        assert instance.get.await_count == 2

    @pytest.mark.asyncio
    async def test_fetch_request_error_is_fetch_failure(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=1)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            instance = _mock_client(mock_client, _ok_response(b"unused"))
            instance.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(FetchFailure) as exc_info:
                await fetcher.fetch("https://example.com/feed", source="test")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_fetch_json(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=1)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _ok_response(b'{"ttl": 5}'))
            payload = await fetcher.fetch_json("https://example.com/x.json", source="test")

        assert payload == {"ttl": 5}

    @pytest.mark.asyncio
    async def test_fetch_json_invalid_raises_decode_failure(self) -> None:
        fetcher = HttpFetcher(timeout_sec=5, max_retries=1)

        with patch("redmaple.services.fetcher.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _ok_response(b"<html>"))
            with pytest.raises(DecodeFailure):
                await fetcher.fetch_json("https://example.com/x.json", source="test")
