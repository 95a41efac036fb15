"""Analysis orchestrator: fetch -> recommend for every ticker in a watchlist.

Chooses the live Polygon + chat-model path when both API keys are
configured, otherwise the mock generator.  A run is all-or-nothing: the
first ticker to fail aborts the rest and the run reports a single
``BatchAnalysisError``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence

from Stock_Analyzer.agents.recommender import RecommendationClient
from Stock_Analyzer.config import Settings
from Stock_Analyzer.models import AnalysisResult
from Stock_Analyzer.services.market_data import MarketDataClient
from Stock_Analyzer.services.mock_data import MockDataGenerator
from Stock_Analyzer.utils.exceptions import (
    BatchAnalysisError,
    DataFetchError,
    RecommendationError,
)

logger = logging.getLogger(__name__)

type _Analyzer = Callable[[str], Awaitable[AnalysisResult]]

# Failures that abort a run; anything else is a bug and propagates as-is
_RUN_FAILURES: tuple[type[Exception], ...] = (DataFetchError, RecommendationError)


class AnalysisOrchestrator:
    """Runs the per-ticker pipeline over a list of tickers.

    Parameters
    ----------
    settings:
        Resolved settings.  ``mock_mode`` selects the data path and
        ``max_concurrency`` bounds per-run fan-out (1 = sequential).
    market_client:
        Optional live market-data client.  When omitted, one is built from
        *settings* for each live run and closed afterwards.
    recommender:
        Optional live recommendation client, same lifecycle rules.
    mock_generator:
        Generator used in mock mode.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        market_client: MarketDataClient | None = None,
        recommender: RecommendationClient | None = None,
        mock_generator: MockDataGenerator | None = None,
    ) -> None:
        self._settings = settings
        self._market_client = market_client
        self._recommender = recommender
        self._mock = mock_generator or MockDataGenerator()

    @property
    def mock_mode(self) -> bool:
        return self._settings.mock_mode

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, tickers: Sequence[str]) -> list[AnalysisResult]:
        """Analyze every ticker and return results in input order.

        Raises:
            ValueError: If *tickers* is empty.
            BatchAnalysisError: If any ticker fails; no partial results
                are returned.
        """
        if not tickers:
            msg = "Cannot analyze an empty ticker list"
            raise ValueError(msg)

        normalized = [t.strip().upper() for t in tickers]
        mode = "mock" if self.mock_mode else "live"
        logger.info("Analysis run started: %d tickers (%s mode)", len(normalized), mode)
        start_time = time.monotonic()

        if self.mock_mode:
            results = await self._run_batch(normalized, self._analyze_mock)
        else:
            async with self._live_clients() as (market_client, recommender):

                async def _analyze(ticker: str) -> AnalysisResult:
                    return await self._analyze_live(ticker, market_client, recommender)

                results = await self._run_batch(normalized, _analyze)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "Analysis run complete: %d results in %dms (%s mode)",
            len(results),
            elapsed_ms,
            mode,
        )
        return results

    async def analyze_ticker(self, ticker: str) -> AnalysisResult:
        """Analyze a single ticker (the single-ticker dashboard variant)."""
        results = await self.run([ticker])
        return results[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_batch(
        self,
        tickers: list[str],
        analyze: _Analyzer,
    ) -> list[AnalysisResult]:
        """Run *analyze* over *tickers*, sequentially or with bounded fan-out.

        Concurrent runs use a TaskGroup so the first failure cancels the
        remaining tickers; results keep input order either way.
        """
        max_concurrency = self._settings.max_concurrency
        if max_concurrency <= 1 or len(tickers) == 1:
            return [await self._guarded(ticker, analyze) for ticker in tickers]

        semaphore = asyncio.Semaphore(max_concurrency)

        async def _bounded(ticker: str) -> AnalysisResult:
            async with semaphore:
                return await self._guarded(ticker, analyze)

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(_bounded(ticker)) for ticker in tickers]
        except ExceptionGroup as eg:
            batch_errors = [e for e in eg.exceptions if isinstance(e, BatchAnalysisError)]
            if batch_errors:
                raise batch_errors[0]  # noqa: B904
            raise

        return [task.result() for task in tasks]

    async def _guarded(self, ticker: str, analyze: _Analyzer) -> AnalysisResult:
        """Convert a per-ticker failure into the run-level error."""
        try:
            return await analyze(ticker)
        except _RUN_FAILURES as exc:
            logger.error("Analysis aborted at %s: %s", ticker, exc)
            raise BatchAnalysisError(
                f"Analysis failed for {ticker}: {exc}",
                ticker=ticker,
                cause=exc,
            ) from exc

    async def _analyze_live(
        self,
        ticker: str,
        market_client: MarketDataClient,
        recommender: RecommendationClient,
    ) -> AnalysisResult:
        snapshot = await market_client.fetch(ticker)
        recommendation = await recommender.recommend(snapshot)
        return AnalysisResult(snapshot=snapshot, recommendation=recommendation)

    async def _analyze_mock(self, ticker: str) -> AnalysisResult:
        snapshot = self._mock.mock_snapshot(ticker)
        # Simulated model latency, so the dashboard's loading state is visible
        if self._settings.mock_delay_seconds > 0:
            await asyncio.sleep(self._settings.mock_delay_seconds)
        recommendation = self._mock.mock_recommendation(snapshot)
        return AnalysisResult(snapshot=snapshot, recommendation=recommendation)

    @contextlib.asynccontextmanager
    async def _live_clients(
        self,
    ) -> AsyncIterator[tuple[MarketDataClient, RecommendationClient]]:
        """Yield the injected clients, or build per-run clients and close them."""
        async with contextlib.AsyncExitStack() as stack:
            market_client = self._market_client
            if market_client is None:
                market_client = await stack.enter_async_context(MarketDataClient(self._settings))
            recommender = self._recommender
            if recommender is None:
                recommender = await stack.enter_async_context(
                    RecommendationClient(self._settings),
                )
            yield market_client, recommender
