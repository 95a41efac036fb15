"""StrEnum types for the stock-analysis domain.

Recommendation and risk values are uppercase because that is the wire
format the language model is asked to produce.  Use enum members in
business logic, never raw strings.
"""

from enum import StrEnum


class RecommendationAction(StrEnum):
    """Trading action recommended for a ticker."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class RiskLevel(StrEnum):
    """Risk classification attached to a recommendation."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnalysisStatus(StrEnum):
    """Lifecycle state of an analysis session."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class MarketDataVariant(StrEnum):
    """Which Polygon endpoint pair is used to build a snapshot."""

    AGGREGATES = "aggregates"
    LAST_TRADE = "last_trade"
