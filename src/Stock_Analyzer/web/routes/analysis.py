"""Analysis API routes.

GET  /api/analysis          Current session state (status, results, error).
POST /api/analysis          Analyze every ticker on the watchlist.
POST /api/analysis/{symbol} Analyze one ticker without touching the session.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.models import AnalysisResult, AnalysisState
from Stock_Analyzer.web.deps import get_session, validate_ticker_symbol

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("", response_model=AnalysisState)
async def get_analysis_state(
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> AnalysisState:
    """Return the current analysis state for the dashboard."""
    return session.state


@router.post("", response_model=AnalysisState)
async def run_analysis(
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> AnalysisState:
    """Run the pipeline over the watchlist and return the completed state.

    A run already in progress yields 409 and a failed run yields 502, both
    via the registered exception handlers.  The session state reflects the
    failure either way.
    """
    try:
        return await session.run()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{symbol}", response_model=AnalysisResult)
async def analyze_symbol(
    symbol: Annotated[str, Depends(validate_ticker_symbol)],
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> AnalysisResult:
    """Analyze a single ticker and return its result."""
    result = await session.orchestrator.analyze_ticker(symbol)
    logger.info("Single-ticker analysis complete for %s", symbol)
    return result
