"""Tests for Recommendation, AnalysisResult and AnalysisState.

Covers:
- confidence clamped into [60, 100] and rounded
- action and risk level normalization, MEDIUM default
- price target coercion
- AnalysisState defaults
"""

from decimal import Decimal

import pydantic
import pytest

from Stock_Analyzer.models import (
    AnalysisResult,
    AnalysisState,
    AnalysisStatus,
    Recommendation,
    RecommendationAction,
    RiskLevel,
)


def _rec(**overrides: object) -> Recommendation:
    fields: dict[str, object] = {
        "recommendation": "BUY",
        "confidence": 75,
        "reasoning": "Solid momentum.",
    }
    fields.update(overrides)
    return Recommendation(**fields)  # type: ignore[arg-type]


class TestConfidence:
    """Confidence clamping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(-5, 60), (0, 60), (59.4, 60), (72.6, 73), (100, 100), (150, 100), ("88", 88)],
    )
    def test_clamped(self, raw: object, expected: int) -> None:
        assert _rec(confidence=raw).confidence == expected

    @pytest.mark.parametrize("raw", ["high", None, float("nan"), True])
    def test_non_numeric_rejected(self, raw: object) -> None:
        with pytest.raises(pydantic.ValidationError):
            _rec(confidence=raw)


class TestActionAndRisk:
    def test_action_case_insensitive(self) -> None:
        assert _rec(recommendation=" hold ").recommendation == RecommendationAction.HOLD

    def test_invalid_action_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            _rec(recommendation="STRONG BUY")

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_risk_defaults_to_medium(self, raw: object) -> None:
        assert _rec(risk_level=raw).risk_level == RiskLevel.MEDIUM

    def test_risk_case_insensitive(self) -> None:
        assert _rec(risk_level="high").risk_level == RiskLevel.HIGH

    def test_invalid_risk_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            _rec(risk_level="EXTREME")

    def test_empty_reasoning_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            _rec(reasoning="")


class TestPriceTarget:
    def test_numeric_target_kept(self) -> None:
        assert _rec(price_target=172.5).price_target == Decimal("172.5")

    def test_unparseable_target_is_none(self) -> None:
        assert _rec(price_target="around 170").price_target is None

    def test_serialized_as_cent_string(self) -> None:
        data = _rec(price_target="172.456").model_dump(mode="json")
        assert data["price_target"] == "172.46"


class TestAnalysisState:
    def test_defaults(self) -> None:
        state = AnalysisState()
        assert state.status == AnalysisStatus.IDLE
        assert state.results == []
        assert state.error is None

    def test_result_ticker(self, sample_result: AnalysisResult) -> None:
        assert sample_result.ticker == "AAPL"
