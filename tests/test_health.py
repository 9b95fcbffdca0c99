"""Tests for health endpoint."""

import pytest
from httpx import AsyncClient

from redmaple.dependencies import Services


@pytest.mark.asyncio
async def test_health_endpoint_returns_200(client: AsyncClient) -> None:
    """Test that health endpoint returns 200 with expected fields."""
    response = await client.get("/health")

    assert response.status_code == 200

    data = response.json()
    assert data["service"] == "Red Maple Dashboard"
    assert data["status"] == "healthy"
    assert "version" in data
    assert "environment" in data
    assert "timestamp" in data
    assert data["checks"]["stops"] > 0
    assert isinstance(data["checks"]["exportHub"], dict)
    assert data["checks"]["exportHub"]["running"] is False
    assert data["checks"]["exportHub"]["cycleCount"] == 0
    assert data["issues"] == []


@pytest.mark.asyncio
async def test_health_endpoint_lists_providers(client: AsyncClient) -> None:
    response = await client.get("/health")
    providers = response.json()["checks"]["exportHub"]["providers"]

    assert providers == ["home-assistant", "citibike:Park Ave & E 42 St", "weather"]


@pytest.mark.asyncio
async def test_health_degraded_when_hub_expected_but_stopped(
    client: AsyncClient, services: Services
) -> None:
    services.settings.export_auto_start = True

    response = await client.get("/health")
    data = response.json()

    assert data["status"] == "degraded"
    assert data["issues"] == ["Export hub is not running"]


@pytest.mark.asyncio
async def test_health_endpoint_has_request_id_header(client: AsyncClient) -> None:
    """Test that health endpoint response includes X-Request-ID header."""
    response = await client.get("/health")

    assert "X-Request-ID" in response.headers
    assert len(response.headers["X-Request-ID"]) > 0


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
