"""Dependency injection providers for FastAPI route handlers.

The settings and the analysis session are created once by the app factory
and stored on ``app.state``.  Route handlers never construct them
directly; they declare dependencies and FastAPI injects them.
"""

import logging
from typing import Annotated

from fastapi import HTTPException, Path, Request

from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.config import Settings
from Stock_Analyzer.models.watchlist import normalize_ticker
from Stock_Analyzer.utils.exceptions import InvalidTickerError

logger = logging.getLogger(__name__)


async def get_settings(request: Request) -> Settings:
    """Return the application-wide Settings."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AnalysisSession:
    """Return the application-wide AnalysisSession (watchlist + run state)."""
    session: AnalysisSession = request.app.state.session
    return session


async def validate_ticker_symbol(
    symbol: Annotated[str, Path(description="Ticker symbol (1-6 alphanumeric characters)")],
) -> str:
    """Validate and normalize a ticker symbol path parameter.

    Raises HTTP 422 if the symbol is invalid.

    Returns:
        The validated uppercase ticker symbol.
    """
    try:
        return normalize_ticker(symbol)
    except InvalidTickerError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
