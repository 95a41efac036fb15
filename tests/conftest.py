"""Shared test fixtures for the Stock Analyzer test suite.

Provides realistic sample instances of the core models and settings so
tests don't need to inline construction blocks.
"""

from decimal import Decimal

import pytest

from Stock_Analyzer.config import Settings
from Stock_Analyzer.models import (
    AnalysisResult,
    MarketSnapshot,
    Recommendation,
    RecommendationAction,
    RiskLevel,
)


_SETTINGS_ENV_VARS: tuple[str, ...] = (
    "POLYGON_API_KEY",
    "OPENAI_API_KEY",
    "POLYGON_BASE_URL",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "MARKET_DATA_VARIANT",
    "MARKET_DATA_LOOKBACK_DAYS",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "MAX_CONCURRENCY",
    "MOCK_DELAY_SECONDS",
)


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of every Settings() built in tests."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def sample_snapshot() -> MarketSnapshot:
    """AAPL up 2.00 on a 148.00 previous close."""
    return MarketSnapshot(
        ticker="AAPL",
        price=Decimal("150.00"),
        previous_close=Decimal("148.00"),
        volume=52_340_000,
        open=Decimal("148.50"),
        high=Decimal("151.25"),
        low=Decimal("147.90"),
    )


@pytest.fixture()
def sample_recommendation() -> Recommendation:
    """A BUY recommendation as a live model would return it."""
    return Recommendation(
        recommendation=RecommendationAction.BUY,
        confidence=78,
        reasoning="Momentum is positive and volume confirms the move.",
        risk_level=RiskLevel.MEDIUM,
        price_target=Decimal("165.00"),
        model_used="gpt-4o-mini",
    )


@pytest.fixture()
def sample_result(
    sample_snapshot: MarketSnapshot,
    sample_recommendation: Recommendation,
) -> AnalysisResult:
    return AnalysisResult(snapshot=sample_snapshot, recommendation=sample_recommendation)


@pytest.fixture()
def mock_settings() -> Settings:
    """Settings with no API keys (mock mode) and no simulated delay."""
    return Settings(mock_delay_seconds=0)


@pytest.fixture()
def live_settings() -> Settings:
    """Settings with both API keys set, pointed at test hosts."""
    return Settings(
        polygon_api_key="pk_test_123456789",
        openai_api_key="sk-test-123456789",
        polygon_base_url="https://polygon.test",
        openai_base_url="https://llm.test/v1",
        request_timeout=5.0,
        mock_delay_seconds=0,
    )
