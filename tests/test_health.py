"""Health endpoint integration test."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint returns status and registered categories."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "assistant-core"
    assert "brainstorm" in data["categories"]
    assert len(data["categories"]) == 7
    assert data["sessions"] == 0
