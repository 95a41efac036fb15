"""Tests for the /api/analysis endpoints.

Covers:
- GET returns the idle state before any run
- POST on an empty watchlist -> 400
- POST runs the watchlist in mock mode and returns the complete state
- Failed run -> 502 and GET shows the failed state
- Concurrent run -> 409
- POST /api/analysis/{symbol} single-ticker analysis and symbol validation
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI

from Stock_Analyzer.agents.orchestrator import AnalysisOrchestrator
from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.models import TickerWatchlist
from Stock_Analyzer.utils.exceptions import (
    AnalysisInProgressError,
    BatchAnalysisError,
    DataSourceUnavailableError,
)


class TestGetState:
    @pytest.mark.asyncio()
    async def test_idle(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/analysis")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "idle"
        assert body["results"] == []
        assert body["mock_mode"] is True


class TestRunAnalysis:
    """Tests for POST /api/analysis."""

    @pytest.mark.asyncio()
    async def test_empty_watchlist(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/analysis")
        assert response.status_code == 400
        assert "ticker" in response.json()["detail"]

    @pytest.mark.asyncio()
    async def test_mock_run(self, client: httpx.AsyncClient, session: AnalysisSession) -> None:
        session.watchlist.add("AAPL")
        session.watchlist.add("TSLA")

        response = await client.post("/api/analysis")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "complete"
        assert [r["snapshot"]["ticker"] for r in body["results"]] == ["AAPL", "TSLA"]
        first = body["results"][0]
        assert first["recommendation"]["recommendation"] in {"BUY", "SELL", "HOLD"}
        assert 60 <= first["recommendation"]["confidence"] <= 100
        assert isinstance(first["snapshot"]["price"], str)

        state = await client.get("/api/analysis")
        assert state.json()["status"] == "complete"

    @pytest.mark.asyncio()
    async def test_failed_run(self, app: FastAPI, client: httpx.AsyncClient) -> None:
        cause = DataSourceUnavailableError(
            "Failed to fetch stock data for TSLA: Polygon returned HTTP 500",
            ticker="TSLA",
            source="polygon",
            http_status=500,
        )
        orchestrator = AsyncMock(spec=AnalysisOrchestrator)
        orchestrator.mock_mode = False
        orchestrator.run = AsyncMock(
            side_effect=BatchAnalysisError(
                f"Analysis failed for TSLA: {cause}", ticker="TSLA", cause=cause
            ),
        )
        app.state.session = AnalysisSession(orchestrator, TickerWatchlist(["TSLA"]))

        response = await client.post("/api/analysis")

        assert response.status_code == 502
        assert response.json()["ticker"] == "TSLA"
        assert "TSLA" in response.json()["detail"]

        state = (await client.get("/api/analysis")).json()
        assert state["status"] == "failed"
        assert "TSLA" in state["error"]

    @pytest.mark.asyncio()
    async def test_concurrent_run_conflict(
        self, app: FastAPI, client: httpx.AsyncClient
    ) -> None:
        stub = AsyncMock(spec=AnalysisSession)
        stub.run = AsyncMock(side_effect=AnalysisInProgressError("already running"))
        app.state.session = stub

        response = await client.post("/api/analysis")
        assert response.status_code == 409


class TestAnalyzeSymbol:
    """Tests for POST /api/analysis/{symbol}."""

    @pytest.mark.asyncio()
    async def test_single_ticker(
        self, client: httpx.AsyncClient, session: AnalysisSession
    ) -> None:
        response = await client.post("/api/analysis/nvda")
        assert response.status_code == 200
        body = response.json()
        assert body["snapshot"]["ticker"] == "NVDA"
        assert body["recommendation"]["model_used"] == "mock"
        assert session.state.status == "idle"

    @pytest.mark.asyncio()
    async def test_invalid_symbol(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/analysis/BAD$")
        assert response.status_code == 422
