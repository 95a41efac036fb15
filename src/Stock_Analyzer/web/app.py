"""FastAPI app factory: settings, session state, handlers and routers."""

import logging

from fastapi import FastAPI

from Stock_Analyzer.agents.orchestrator import AnalysisOrchestrator
from Stock_Analyzer.agents.session import AnalysisSession
from Stock_Analyzer.config import Settings
from Stock_Analyzer.logging_config import configure_logging
from Stock_Analyzer.web.middleware import RequestLoggingMiddleware, register_exception_handlers

logger = logging.getLogger(__name__)

API_PREFIX: str = "/api"


# ---------------------------------------------------------------------------
# App Factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Resolved settings.  Read from the environment when omitted.

    Returns:
        The configured app, holding one ``AnalysisSession`` on ``app.state``.
    """
    configure_logging()

    resolved = settings if settings is not None else Settings.from_env()

    app = FastAPI(title="Stock Analyzer")
    app.state.settings = resolved
    app.state.session = AnalysisSession(AnalysisOrchestrator(resolved))

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    # Routes
    from Stock_Analyzer.web.routes import analysis_router, health_router, watchlist_router

    app.include_router(watchlist_router, prefix=API_PREFIX)
    app.include_router(analysis_router, prefix=API_PREFIX)
    app.include_router(health_router, prefix=API_PREFIX)

    logger.info(
        "Stock Analyzer web app created (%s mode)",
        "mock" if resolved.mock_mode else "live",
    )
    return app
