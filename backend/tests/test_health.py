"""Tests for health check endpoint."""

import pytest


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/health", "/api/health"])
async def test_health_check(client, path):
    """Test that health endpoints return ok status with a timestamp."""
    response = await client.get(path)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_root(client):
    """Test that root endpoint returns API info."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "FHIRSquire API"
    assert data["version"] == "0.1.0"
    assert data["docs"] == "/docs"
