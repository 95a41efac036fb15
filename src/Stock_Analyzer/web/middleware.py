"""Exception handlers and request logging middleware.

Domain exceptions from ``Stock_Analyzer.utils.exceptions`` become JSON
error responses with a fixed status per exception type.  Every response
body carries ``detail`` and, when the exception knows it, the ``ticker``.
"""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from Stock_Analyzer.utils.exceptions import (
    AnalysisInProgressError,
    BatchAnalysisError,
    DataFetchError,
    DataSourceUnavailableError,
    InvalidTickerError,
    RecommendationError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)

type _Handler = Callable[[Request, Exception], Awaitable[JSONResponse]]

# ---------------------------------------------------------------------------
# Domain exception -> HTTP status table
# ---------------------------------------------------------------------------

# Starlette matches handlers along the exception MRO, so subclasses win.
_ERROR_STATUS: list[tuple[type[Exception], int, int]] = [
    (TickerNotFoundError, 404, logging.WARNING),
    (DataSourceUnavailableError, 503, logging.ERROR),
    (DataFetchError, 502, logging.ERROR),
    (RecommendationError, 502, logging.ERROR),
    (BatchAnalysisError, 502, logging.ERROR),
    (AnalysisInProgressError, 409, logging.WARNING),
    (InvalidTickerError, 422, logging.INFO),
]

# Polled by the dashboard; kept out of the INFO access log
_QUIET_PATHS: frozenset[str] = frozenset({"/api/health", "/api/analysis"})


def _make_handler(status_code: int, log_level: int) -> _Handler:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.log(
            log_level,
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
        )
        content: dict[str, str] = {"detail": str(exc)}
        ticker = getattr(exc, "ticker", None)
        if ticker:
            content["ticker"] = ticker
        return JSONResponse(status_code=status_code, content=content)

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """Register one JSON handler per domain exception type on *app*."""
    for exc_type, status_code, log_level in _ERROR_STATUS:
        app.add_exception_handler(exc_type, _make_handler(status_code, log_level))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration for every request.

    Polling reads (GET on the health and analysis-state routes) are logged
    at DEBUG.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        polled = request.method == "GET" and path in _QUIET_PATHS
        logger.log(
            logging.DEBUG if polled else logging.INFO,
            "%s %s -> %d (%.1fms)",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
        )
        return response
