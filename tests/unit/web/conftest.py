"""Shared fixtures for web route tests.

Provides a test FastAPI app in mock mode and an async client bound to it
through ``httpx.ASGITransport`` so route tests never hit external services.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.config import Settings
from Stock_Analyzer.web.app import create_app


@pytest.fixture()
def app(mock_settings: Settings) -> FastAPI:
    """A mock-mode app with no simulated model latency."""
    return create_app(mock_settings)


@pytest.fixture()
def session(app: FastAPI) -> AnalysisSession:
    """The app's analysis session, for arranging watchlist state directly."""
    result: AnalysisSession = app.state.session
    return result


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
