"""Tests for RecommendationClient.

The LLM client is mocked; no real API calls.

Covers:
- Valid reply -> Recommendation with the responding model's name
- Missing reasoning / invalid JSON / empty content -> RecommendationError
- Timeout, HTTP status and transport failures -> RecommendationError
- Non-object or structurally broken completion bodies -> RecommendationError
- Construction requires an OpenAI key unless a client is injected
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from Stock_Analyzer.agents.llm_client import ChatMessage, LLMClient, LLMResponse
from Stock_Analyzer.agents.recommender import RecommendationClient
from Stock_Analyzer.config import Settings
from Stock_Analyzer.models import MarketSnapshot, RecommendationAction
from Stock_Analyzer.utils.exceptions import RecommendationError

VALID_REPLY: str = json.dumps(
    {
        "recommendation": "HOLD",
        "confidence": 70,
        "reasoning": "Price is consolidating after a strong run.",
        "riskLevel": "MEDIUM",
        "priceTarget": 155,
    }
)


def _response(content: str, model: str = "gpt-4o-mini") -> LLMResponse:
    return LLMResponse(
        content=content,
        model=model,
        input_tokens=300,
        output_tokens=60,
        duration_ms=900,
    )


def _recommender(
    live_settings: Settings,
    **chat_kwargs: object,
) -> tuple[RecommendationClient, AsyncMock]:
    """Build a recommender around a mocked LLMClient whose chat() is configured by kwargs."""
    mock_llm = AsyncMock(spec=LLMClient)
    mock_llm.model = "gpt-4o-mini"
    mock_llm.chat = AsyncMock(**chat_kwargs)
    return RecommendationClient(live_settings, llm_client=mock_llm), mock_llm


class TestRecommendSuccess:
    """Happy path."""

    @pytest.mark.asyncio()
    async def test_valid_reply(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        recommender, mock_llm = _recommender(live_settings, return_value=_response(VALID_REPLY))

        rec = await recommender.recommend(sample_snapshot)

        assert rec.recommendation == RecommendationAction.HOLD
        assert rec.confidence == 70
        assert rec.model_used == "gpt-4o-mini"

        messages = mock_llm.chat.await_args.args[0]
        assert all(isinstance(m, ChatMessage) for m in messages)
        assert messages[0].role == "system"
        assert "Stock: AAPL" in messages[1].content


class TestRecommendFailures:
    """Every failure surfaces as RecommendationError naming the ticker."""

    @pytest.mark.asyncio()
    async def test_missing_reasoning(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        reply = json.dumps({"recommendation": "BUY", "confidence": 80})
        recommender, _ = _recommender(live_settings, return_value=_response(reply))

        with pytest.raises(RecommendationError, match="Invalid response format") as exc_info:
            await recommender.recommend(sample_snapshot)
        assert exc_info.value.ticker == "AAPL"
        assert "reasoning" in str(exc_info.value)

    @pytest.mark.asyncio()
    async def test_invalid_json(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        recommender, _ = _recommender(live_settings, return_value=_response("BUY it!"))
        with pytest.raises(RecommendationError, match="Invalid response format"):
            await recommender.recommend(sample_snapshot)

    @pytest.mark.asyncio()
    async def test_empty_content(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        recommender, _ = _recommender(live_settings, return_value=_response(""))
        with pytest.raises(RecommendationError, match="No response from model for AAPL"):
            await recommender.recommend(sample_snapshot)

    @pytest.mark.asyncio()
    async def test_timeout(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        recommender, _ = _recommender(live_settings, side_effect=TimeoutError())
        with pytest.raises(RecommendationError, match="timed out") as exc_info:
            await recommender.recommend(sample_snapshot)
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.asyncio()
    async def test_http_status_error(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
        error = httpx.HTTPStatusError(
            "rate limited",
            request=request,
            response=httpx.Response(429, request=request),
        )
        recommender, _ = _recommender(live_settings, side_effect=error)
        with pytest.raises(RecommendationError, match="HTTP 429"):
            await recommender.recommend(sample_snapshot)

    @pytest.mark.asyncio()
    async def test_transport_error(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot
    ) -> None:
        recommender, _ = _recommender(live_settings, side_effect=httpx.ConnectError("refused"))
        with pytest.raises(RecommendationError) as exc_info:
            await recommender.recommend(sample_snapshot)
        assert exc_info.value.model == "gpt-4o-mini"

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("body", [[], {"choices": "none", "usage": [1, 2]}])
    async def test_malformed_completion_body(
        self, live_settings: Settings, sample_snapshot: MarketSnapshot, body: object
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        llm = LLMClient(
            api_key="sk-test",
            base_url=live_settings.openai_base_url,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        recommender = RecommendationClient(live_settings, llm_client=llm)
        with pytest.raises(RecommendationError) as exc_info:
            await recommender.recommend(sample_snapshot)
        assert exc_info.value.ticker == "AAPL"


class TestConstruction:
    def test_requires_key(self, mock_settings: Settings) -> None:
        with pytest.raises(ValueError, match="OpenAI API key"):
            RecommendationClient(mock_settings)

    @pytest.mark.asyncio()
    async def test_injected_client_not_closed(self, mock_settings: Settings) -> None:
        mock_llm = AsyncMock(spec=LLMClient)
        async with RecommendationClient(mock_settings, llm_client=mock_llm):
            pass
        mock_llm.aclose.assert_not_awaited()
