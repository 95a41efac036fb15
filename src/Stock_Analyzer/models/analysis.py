"""Analysis models: recommendations, per-ticker results, and session state.

Recommendation enforces its own invariants (confidence clamping, risk
default) so that every construction path, live or mock, yields a value
the dashboard can render without further checks.
"""

import datetime
import math
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from Stock_Analyzer.models.enums import AnalysisStatus, RecommendationAction, RiskLevel
from Stock_Analyzer.models.market_data import MarketSnapshot, round_cents

# --- Validation boundaries ---
CONFIDENCE_MIN: int = 60
CONFIDENCE_MAX: int = 100

MOCK_MODEL_NAME: str = "mock"


class Recommendation(BaseModel):
    """A BUY/SELL/HOLD call for one snapshot, with confidence and risk.

    Frozen because a recommendation belongs to exactly one snapshot and is
    discarded with it.
    """

    model_config = ConfigDict(frozen=True)

    recommendation: RecommendationAction
    confidence: int
    reasoning: str = Field(min_length=1)
    risk_level: RiskLevel = RiskLevel.MEDIUM
    price_target: Decimal | None = None
    model_used: str = MOCK_MODEL_NAME

    @field_validator("recommendation", mode="before")
    @classmethod
    def normalize_action(cls, value: object) -> object:
        """Accept ``"buy"`` or ``" Buy "`` as well as ``"BUY"``."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: object) -> int:
        """Coerce to a number, clamp into [60, 100] and round to an integer."""
        if isinstance(value, bool):
            msg = f"confidence must be numeric, got {value!r}"
            raise ValueError(msg)
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError) as exc:
            msg = f"confidence must be numeric, got {value!r}"
            raise ValueError(msg) from exc
        if math.isnan(number):
            msg = "confidence must be numeric, got NaN"
            raise ValueError(msg)
        clamped = max(float(CONFIDENCE_MIN), min(number, float(CONFIDENCE_MAX)))
        return round(clamped)

    @field_validator("risk_level", mode="before")
    @classmethod
    def default_risk_level(cls, value: object) -> object:
        """Missing or empty risk levels default to MEDIUM."""
        if not value:
            return RiskLevel.MEDIUM
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("price_target", mode="before")
    @classmethod
    def coerce_price_target(cls, value: object) -> Decimal | None:
        """Keep numeric targets as-is; anything unparseable becomes None."""
        if value is None or isinstance(value, bool):
            return None
        try:
            target = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
        return target if target.is_finite() else None

    @field_serializer("price_target")
    def serialize_price_target(self, value: Decimal | None) -> str | None:
        """Serialize the target as a cent-rounded string."""
        if value is None:
            return None
        return str(round_cents(value))


class AnalysisResult(BaseModel):
    """A snapshot paired with the recommendation derived from it."""

    model_config = ConfigDict(frozen=True)

    snapshot: MarketSnapshot
    recommendation: Recommendation

    @property
    def ticker(self) -> str:
        return self.snapshot.ticker


class AnalysisState(BaseModel):
    """Point-in-time view of an analysis session for the presentation layer.

    ``results`` is the last *successful* result list; a failed run leaves
    it untouched and reports through ``error`` instead.
    """

    model_config = ConfigDict(frozen=True)

    status: AnalysisStatus = AnalysisStatus.IDLE
    tickers: list[str] = Field(default_factory=list)
    results: list[AnalysisResult] = Field(default_factory=list)
    error: str | None = None
    mock_mode: bool = True
    started_at: datetime.datetime | None = None
    completed_at: datetime.datetime | None = None
