"""FastAPI route modules for Stock Analyzer.

Re-exports all routers so the application factory can import them:
    from Stock_Analyzer.web.routes import analysis_router, watchlist_router
"""

from Stock_Analyzer.web.routes.analysis import router as analysis_router
from Stock_Analyzer.web.routes.health import router as health_router
from Stock_Analyzer.web.routes.watchlist import router as watchlist_router

__all__ = [
    "analysis_router",
    "health_router",
    "watchlist_router",
]
