"""Watchlist CRUD endpoints.

Provides list, add, and remove operations on the session's in-memory
watchlist.  The watchlist is the input to the next analysis run.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from pydantic import BaseModel, ConfigDict

from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.web.deps import get_session, validate_ticker_symbol

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class WatchlistAddRequest(BaseModel):
    """Request body for adding a ticker to the watchlist."""

    model_config = ConfigDict(frozen=True)

    ticker: str


class WatchlistItem(BaseModel):
    """A single ticker on the watchlist."""

    model_config = ConfigDict(frozen=True)

    ticker: str


class WatchlistResponse(BaseModel):
    """The watchlist in insertion order."""

    model_config = ConfigDict(frozen=True)

    tickers: list[str]
    count: int


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("", response_model=WatchlistResponse)
async def list_watchlist(
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> WatchlistResponse:
    """Return all tickers on the watchlist."""
    tickers = session.watchlist.tickers
    logger.debug("Watchlist retrieved: %d tickers", len(tickers))
    return WatchlistResponse(tickers=tickers, count=len(tickers))


@router.post("", response_model=WatchlistItem, status_code=status.HTTP_201_CREATED)
async def add_to_watchlist(
    body: WatchlistAddRequest,
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> WatchlistItem:
    """Add a ticker to the watchlist.

    The ticker is normalized to uppercase and validated against the
    standard symbol pattern before insertion.  Duplicates are rejected
    with 409 and leave the list unchanged.
    """
    normalized = await validate_ticker_symbol(body.ticker)
    if not session.watchlist.add(normalized):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{normalized} is already on the watchlist",
        )
    logger.info("Ticker %s added to watchlist", normalized)
    return WatchlistItem(ticker=normalized)


@router.delete(
    "/{ticker}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def remove_from_watchlist(
    ticker: Annotated[str, Path(description="Ticker symbol to remove")],
    session: Annotated[AnalysisSession, Depends(get_session)],
) -> None:
    """Remove a ticker from the watchlist."""
    normalized = await validate_ticker_symbol(ticker)
    if not session.watchlist.remove(normalized):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{normalized} is not on the watchlist",
        )
    logger.info("Ticker %s removed from watchlist", normalized)
