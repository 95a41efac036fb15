"""Analysis session: the watchlist plus the state the dashboard renders.

State machine per run: ``idle -> running -> {complete, failed}``; starting
another run moves either terminal state back to ``running``.  A failed run
keeps the last successful result list and reports its error separately.
"""

from __future__ import annotations

import asyncio
import datetime
import logging

from Stock_Analyzer.agents.orchestrator import AnalysisOrchestrator
from Stock_Analyzer.models import AnalysisState, AnalysisStatus, TickerWatchlist
from Stock_Analyzer.utils.exceptions import AnalysisInProgressError

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class AnalysisSession:
    """Owns the watchlist and the current ``AnalysisState``.

    Parameters
    ----------
    orchestrator:
        Runs the per-ticker pipeline.
    watchlist:
        Initial watchlist; a fresh empty one is created when omitted.
    """

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        watchlist: TickerWatchlist | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._watchlist = watchlist if watchlist is not None else TickerWatchlist()
        self._state = AnalysisState(mock_mode=orchestrator.mock_mode)

    @property
    def orchestrator(self) -> AnalysisOrchestrator:
        return self._orchestrator

    @property
    def watchlist(self) -> TickerWatchlist:
        return self._watchlist

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.status == AnalysisStatus.RUNNING

    async def run(self) -> AnalysisState:
        """Analyze the current watchlist and return the resulting state.

        Raises:
            AnalysisInProgressError: If a run is already in progress.
            ValueError: If the watchlist is empty.
            BatchAnalysisError: If the run fails.  The state is already
                ``failed`` with the previous results preserved.
        """
        if self.is_running:
            msg = "An analysis run is already in progress"
            raise AnalysisInProgressError(msg)

        tickers = self._watchlist.tickers
        if not tickers:
            msg = "Add at least one ticker before starting an analysis"
            raise ValueError(msg)

        self._state = self._state.model_copy(
            update={
                "status": AnalysisStatus.RUNNING,
                "tickers": tickers,
                "error": None,
                "started_at": _now(),
                "completed_at": None,
            },
        )

        try:
            results = await self._orchestrator.run(tickers)
        except asyncio.CancelledError:
            self._fail("Analysis was cancelled")
            raise
        except Exception as exc:
            self._fail(str(exc))
            raise

        self._state = self._state.model_copy(
            update={
                "status": AnalysisStatus.COMPLETE,
                "results": results,
                "completed_at": _now(),
            },
        )
        logger.info("Session run complete: %d results", len(results))
        return self._state

    def _fail(self, message: str) -> None:
        logger.warning("Session run failed: %s", message)
        self._state = self._state.model_copy(
            update={
                "status": AnalysisStatus.FAILED,
                "error": message,
                "completed_at": _now(),
            },
        )
