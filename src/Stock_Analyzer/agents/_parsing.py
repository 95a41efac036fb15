"""Strict decode of the model's recommendation JSON.

The model is asked for a JSON object, but the text that comes back is
untrusted.  ``decode_recommendation`` never raises: it returns a tagged
``ParseSuccess`` or ``ParseFailure`` and leaves the decision of how to
report a failure to the caller.

This is a private module, not exported from ``agents/__init__.py``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from Stock_Analyzer.agents.llm_client import ChatMessage
from Stock_Analyzer.agents.prompts import PromptMessage
from Stock_Analyzer.models import Recommendation

logger = logging.getLogger(__name__)

# Regex to strip markdown JSON fences the LLM sometimes wraps around output.
_JSON_FENCE_RE: re.Pattern[str] = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.DOTALL)


# ---------------------------------------------------------------------------
# Wire shape
# ---------------------------------------------------------------------------


class RecommendationPayload(BaseModel):
    """The JSON object the model is instructed to return.

    ``recommendation``, ``confidence`` and ``reasoning`` are required; a
    reply missing any of them is rejected outright.  ``confidence`` is kept
    raw so ``Recommendation`` applies the one coercion rule for every path.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recommendation: str
    confidence: Any
    reasoning: str = Field(min_length=1)
    risk_level: str | None = Field(default=None, alias="riskLevel")
    price_target: float | str | None = Field(default=None, alias="priceTarget")


# ---------------------------------------------------------------------------
# Tagged result
# ---------------------------------------------------------------------------


class ParseSuccess(BaseModel):
    """Decoded recommendation."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    recommendation: Recommendation


class ParseFailure(BaseModel):
    """Why the model's reply could not be used, plus the text that was rejected."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    error: str
    raw: str


type ParseResult = ParseSuccess | ParseFailure


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def prompt_to_chat(messages: list[PromptMessage]) -> list[ChatMessage]:
    """Convert prompt builder output to LLM client input."""
    return [ChatMessage(role=pm.role, content=pm.content) for pm in messages]


def extract_json(raw: str) -> str:
    """Strip markdown fences and leading/trailing noise from *raw*.

    If the LLM wraps its JSON in ```json ... ```, extract the inner text.
    Otherwise return the original string stripped.
    """
    match = _JSON_FENCE_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def decode_recommendation(raw: str, *, model_used: str) -> ParseResult:
    """Decode *raw* model output into a validated ``Recommendation``.

    Confidence clamping and the risk-level default are applied by the
    ``Recommendation`` model itself.
    """
    text = extract_json(raw)
    if not text:
        return ParseFailure(error="empty response content", raw=raw)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Model reply is not valid JSON: %s", exc)
        return ParseFailure(error=f"invalid JSON: {exc.msg}", raw=raw)

    try:
        payload = RecommendationPayload.model_validate(parsed)
        recommendation = Recommendation(
            recommendation=payload.recommendation,
            confidence=payload.confidence,
            reasoning=payload.reasoning,
            risk_level=payload.risk_level,
            price_target=payload.price_target,
            model_used=model_used,
        )
    except pydantic.ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in exc.errors())
        logger.warning("Model reply failed validation (%s)", fields)
        return ParseFailure(error=f"invalid recommendation shape: {fields}", raw=raw)

    return ParseSuccess(recommendation=recommendation)
