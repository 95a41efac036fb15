"""Pydantic v2 models, enums, and the ticker watchlist.

Re-exports all public models so consumers can import directly:
    from Stock_Analyzer.models import MarketSnapshot, Recommendation
"""

from Stock_Analyzer.models.analysis import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    AnalysisResult,
    AnalysisState,
    Recommendation,
)
from Stock_Analyzer.models.enums import (
    AnalysisStatus,
    MarketDataVariant,
    RecommendationAction,
    RiskLevel,
)
from Stock_Analyzer.models.market_data import MarketSnapshot, round_cents
from Stock_Analyzer.models.watchlist import TickerWatchlist, normalize_ticker

__all__ = [
    # Enums
    "AnalysisStatus",
    "MarketDataVariant",
    "RecommendationAction",
    "RiskLevel",
    # Market data
    "MarketSnapshot",
    "round_cents",
    # Analysis
    "CONFIDENCE_MAX",
    "CONFIDENCE_MIN",
    "AnalysisResult",
    "AnalysisState",
    "Recommendation",
    # Watchlist
    "TickerWatchlist",
    "normalize_ticker",
]
