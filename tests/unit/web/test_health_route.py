"""Tests for GET /api/health."""

import httpx
import pytest

from Stock_Analyzer.config import Settings
from Stock_Analyzer.web.app import create_app


class TestHealthRoute:
    @pytest.mark.asyncio()
    async def test_mock_mode(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "mode": "mock", "model": "gpt-4o-mini"}

    @pytest.mark.asyncio()
    async def test_live_mode(self, live_settings: Settings) -> None:
        transport = httpx.ASGITransport(app=create_app(live_settings))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/health")
        assert response.json()["mode"] == "live"
