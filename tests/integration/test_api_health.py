"""Integration tests for health endpoint."""
from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test GET /api/v1/health."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert data["database"] == "healthy"
    assert data["redis"] == "disabled"


@pytest.mark.asyncio
async def test_request_headers(client: AsyncClient):
    """Every response carries a request ID and its processing time."""
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]
    assert float(response.headers["X-Process-Time"]) >= 0
