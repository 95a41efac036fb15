"""Market data client for the Polygon REST API.

Builds a ``MarketSnapshot`` for one ticker from either the daily-aggregates
range endpoint or the last-trade + previous-close endpoint pair.  Every
request is bounded by a timeout and retried once on transport failures;
HTTP error statuses and unusable bodies fail fast as ``DataFetchError``
subclasses that carry the ticker.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from decimal import Decimal
from types import TracebackType
from typing import Any, Final, Self

import httpx

from Stock_Analyzer.config import Settings
from Stock_Analyzer.models.enums import MarketDataVariant
from Stock_Analyzer.models.market_data import MarketSnapshot
from Stock_Analyzer.services._helpers import (
    POLYGON_SOURCE,
    fetch_with_retry,
    optional_decimal,
    safe_int,
)
from Stock_Analyzer.utils.exceptions import (
    DataFetchError,
    DataSourceUnavailableError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AGGREGATES_LIMIT: Final[int] = 120

_HTTP_NOT_FOUND: Final[int] = 404


class MarketDataClient:
    """Async Polygon client returning normalized market snapshots.

    Usage::

        async with MarketDataClient(settings) as client:
            snapshot = await client.fetch("AAPL")

    Parameters
    ----------
    settings:
        Resolved settings; ``polygon_api_key`` must be set.
    http_client:
        Optional pre-built ``httpx.AsyncClient`` (tests inject one with a
        mock transport).  A client passed in is not closed by ``aclose()``.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not settings.polygon_api_key:
            msg = "MarketDataClient requires a Polygon API key; use mock mode without one."
            raise ValueError(msg)
        self._api_key: str = settings.polygon_api_key
        self._base_url: str = settings.polygon_base_url.rstrip("/")
        self._variant: MarketDataVariant = settings.market_data_variant
        self._lookback_days: int = settings.lookback_days
        self._timeout: float = settings.request_timeout
        self._max_retries: int = settings.max_retries
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=5.0),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(self, ticker: str) -> MarketSnapshot:
        """Fetch and normalize the latest market data for *ticker*.

        Raises:
            TickerNotFoundError: If Polygon has no results for the ticker.
            DataSourceUnavailableError: On HTTP errors, timeouts, or
                malformed response bodies.
        """
        ticker = ticker.upper().strip()
        try:
            if self._variant == MarketDataVariant.LAST_TRADE:
                snapshot = await self._fetch_last_trade(ticker)
            else:
                snapshot = await self._fetch_aggregates(ticker)
        except DataFetchError as exc:
            logger.error("Polygon fetch failed for %s: %s", ticker, exc)
            raise

        logger.info(
            "Fetched snapshot for %s: price=%s change=%s",
            ticker,
            snapshot.price,
            snapshot.change,
        )
        return snapshot

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    async def _fetch_aggregates(self, ticker: str) -> MarketSnapshot:
        """Build a snapshot from the daily bars of the lookback window.

        The last bar supplies the session values; the bar before it
        supplies the previous close.
        """
        today = datetime.datetime.now(datetime.UTC).date()
        start = today - datetime.timedelta(days=self._lookback_days)
        path = f"/v2/aggs/ticker/{ticker}/range/1/day/{start.isoformat()}/{today.isoformat()}"
        data = await self._get_json(
            ticker,
            path,
            params={"adjusted": "true", "sort": "asc", "limit": str(AGGREGATES_LIMIT)},
            label=f"Aggregates({ticker})",
        )

        bars = [bar for bar in _results_list(data, ticker) if isinstance(bar, dict)]
        if not bars:
            raise TickerNotFoundError(
                f"No results returned for {ticker}",
                ticker=ticker,
                source=POLYGON_SOURCE,
            )

        latest = bars[-1]
        price = _require_decimal(latest, "c", ticker)
        previous_close = optional_decimal(bars[-2].get("c")) if len(bars) > 1 else None

        return MarketSnapshot(
            ticker=ticker,
            price=price,
            volume=safe_int(latest.get("v")),
            open=optional_decimal(latest.get("o")),
            high=optional_decimal(latest.get("h")),
            low=optional_decimal(latest.get("l")),
            previous_close=previous_close if previous_close is not None else price,
        )

    async def _fetch_last_trade(self, ticker: str) -> MarketSnapshot:
        """Build a snapshot from the last trade plus the previous session bar."""
        trade = await self._get_json(
            ticker,
            f"/v2/last/trade/{ticker}",
            label=f"LastTrade({ticker})",
        )
        trade_result = trade.get("results")
        if not isinstance(trade_result, dict) or not trade_result:
            raise TickerNotFoundError(
                f"No last trade returned for {ticker}",
                ticker=ticker,
                source=POLYGON_SOURCE,
            )
        price = _require_decimal(trade_result, "p", ticker)

        prev = await self._get_json(
            ticker,
            f"/v2/aggs/ticker/{ticker}/prev",
            params={"adjusted": "true"},
            label=f"PreviousClose({ticker})",
        )
        prev_results = _results_list(prev, ticker)
        prev_bar: dict[str, Any] = (
            prev_results[0] if prev_results and isinstance(prev_results[0], dict) else {}
        )
        previous_close = optional_decimal(prev_bar.get("c"))
        if previous_close is None:
            logger.warning("No previous close for %s, using last price", ticker)

        return MarketSnapshot(
            ticker=ticker,
            price=price,
            volume=safe_int(prev_bar.get("v")),
            open=optional_decimal(prev_bar.get("o")),
            high=optional_decimal(prev_bar.get("h")),
            low=optional_decimal(prev_bar.get("l")),
            previous_close=previous_close if previous_close is not None else price,
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        ticker: str,
        path: str,
        *,
        label: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET *path* and return the decoded JSON object body."""
        url = f"{self._base_url}{path}"
        query = {**(params or {}), "apiKey": self._api_key}

        response = await fetch_with_retry(
            lambda: self._do_get(url, query),
            ticker=ticker,
            source=POLYGON_SOURCE,
            label=label,
            max_retries=self._max_retries,
        )

        if response.status_code == _HTTP_NOT_FOUND:
            raise TickerNotFoundError(
                f"Failed to fetch stock data for {ticker}: Polygon returned HTTP 404",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=response.status_code,
            )
        if not response.is_success:
            raise DataSourceUnavailableError(
                f"Failed to fetch stock data for {ticker}: "
                f"Polygon returned HTTP {response.status_code}",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise DataSourceUnavailableError(
                f"Malformed JSON from Polygon for {ticker}",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise DataSourceUnavailableError(
                f"Unexpected Polygon response shape for {ticker}",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=response.status_code,
            )
        return data

    async def _do_get(self, url: str, params: dict[str, str]) -> httpx.Response:
        return await asyncio.wait_for(
            self._client.get(url, params=params),
            timeout=self._timeout,
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _require_decimal(record: dict[str, Any], key: str, ticker: str) -> Decimal:
    """Return ``record[key]`` as a Decimal or raise for a malformed body."""
    value = optional_decimal(record.get(key))
    if value is None:
        raise DataSourceUnavailableError(
            f"Polygon response for {ticker} is missing '{key}'",
            ticker=ticker,
            source=POLYGON_SOURCE,
        )
    return value


def _results_list(data: dict[str, Any], ticker: str) -> list[Any]:
    """Return the ``results`` array of an aggregates body; absent means empty."""
    results = data.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise DataSourceUnavailableError(
            f"Polygon response for {ticker} has malformed 'results'",
            ticker=ticker,
            source=POLYGON_SOURCE,
        )
    return results
