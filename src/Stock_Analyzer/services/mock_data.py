"""Synthetic market data and recommendations for mock mode.

Used whenever vendor credentials are absent so the rest of the pipeline
runs identically.  Values are plausible enough to exercise every field of
the dashboard; they are not a market model.  Neither generator can fail.
"""

from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import Final

from Stock_Analyzer.models import (
    CONFIDENCE_MIN,
    MarketSnapshot,
    Recommendation,
    RecommendationAction,
    RiskLevel,
)
from Stock_Analyzer.models.analysis import MOCK_MODEL_NAME

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BASE_PRICE_MIN: Final[float] = 50.0
_BASE_PRICE_SPAN: Final[float] = 500.0
_CHANGE_SPAN: Final[float] = 20.0
_VOLUME_MAX: Final[int] = 10_000_000
_MARKET_CAP_MAX: Final[float] = 1_000_000_000_000.0

_OPEN_FACTOR: Final[float] = 0.98
_HIGH_FACTOR: Final[float] = 1.05
_LOW_FACTOR: Final[float] = 0.95

# Mock confidence is drawn from [60, 99], matching the dashboard demo
_MOCK_CONFIDENCE_MAX: Final[int] = 99
_PRICE_TARGET_SPREAD: Final[float] = 0.3


def _cents(value: float) -> Decimal:
    return Decimal(f"{value:.2f}")


class MockDataGenerator:
    """Pseudo-random stand-in for the market-data and recommendation clients.

    Parameters
    ----------
    rng:
        Random source.  Pass a seeded ``random.Random`` for reproducible
        output; there is no seeding contract otherwise.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def mock_snapshot(self, ticker: str) -> MarketSnapshot:
        """Fabricate a snapshot around a uniformly drawn base price."""
        base_price = self._rng.random() * _BASE_PRICE_SPAN + _BASE_PRICE_MIN
        change = (self._rng.random() - 0.5) * _CHANGE_SPAN

        snapshot = MarketSnapshot(
            ticker=ticker,
            price=_cents(base_price),
            previous_close=_cents(base_price - change),
            volume=int(self._rng.random() * _VOLUME_MAX),
            market_cap=_cents(self._rng.random() * _MARKET_CAP_MAX),
            open=_cents(base_price * _OPEN_FACTOR),
            high=_cents(base_price * _HIGH_FACTOR),
            low=_cents(base_price * _LOW_FACTOR),
        )
        logger.debug("Mock snapshot for %s: price=%s", snapshot.ticker, snapshot.price)
        return snapshot

    def mock_recommendation(self, snapshot: MarketSnapshot) -> Recommendation:
        """Fabricate a recommendation whose reasoning echoes *snapshot*."""
        action = self._rng.choice(list(RecommendationAction))
        risk_level = self._rng.choice(list(RiskLevel))
        confidence = self._rng.randint(CONFIDENCE_MIN, _MOCK_CONFIDENCE_MAX)
        target_factor = 1 + (self._rng.random() - 0.5) * _PRICE_TARGET_SPREAD

        momentum = "positive" if snapshot.change_percent >= 0 else "negative"
        pressure = "upward" if snapshot.is_up else "downward"
        reasoning = (
            f"Based on current market conditions and {snapshot.ticker}'s recent "
            f"performance showing {momentum} momentum of {snapshot.change_percent:.2f}%, "
            f"this recommendation considers technical indicators, trading volume of "
            f"{snapshot.volume:,}, and fundamental analysis. The stock shows {pressure} "
            f"pressure with current volatility."
        )

        return Recommendation(
            recommendation=action,
            confidence=confidence,
            reasoning=reasoning,
            risk_level=risk_level,
            price_target=(snapshot.price * Decimal(str(target_factor))).quantize(Decimal("0.01")),
            model_used=MOCK_MODEL_NAME,
        )


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------

_default_generator = MockDataGenerator()


def mock_snapshot(ticker: str) -> MarketSnapshot:
    """Fabricate a snapshot using the shared default generator."""
    return _default_generator.mock_snapshot(ticker)


def mock_recommendation(snapshot: MarketSnapshot) -> Recommendation:
    """Fabricate a recommendation using the shared default generator."""
    return _default_generator.mock_recommendation(snapshot)
