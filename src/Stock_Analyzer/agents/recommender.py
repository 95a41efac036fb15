"""Recommendation client: snapshot in, BUY/SELL/HOLD recommendation out.

One chat completion per call.  Endpoint errors, empty content and replies
that fail the strict decode all surface as ``RecommendationError``; there
is no retry, so the caller sees exactly one failure per call.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Self

import httpx

from Stock_Analyzer.agents._parsing import ParseFailure, decode_recommendation, prompt_to_chat
from Stock_Analyzer.agents.llm_client import LLMClient
from Stock_Analyzer.agents.prompts import PROMPT_VERSION, build_recommendation_messages
from Stock_Analyzer.config import Settings
from Stock_Analyzer.models import MarketSnapshot, Recommendation
from Stock_Analyzer.utils.exceptions import RecommendationError

logger = logging.getLogger(__name__)


class RecommendationClient:
    """Asks a chat model for a recommendation on a market snapshot.

    Parameters
    ----------
    settings:
        Resolved settings; ``openai_api_key`` must be set unless an
        ``llm_client`` is supplied.
    llm_client:
        Optional pre-built ``LLMClient``; not closed by ``aclose()``.
    """

    def __init__(
        self,
        settings: Settings,
        llm_client: LLMClient | None = None,
    ) -> None:
        if llm_client is None and not settings.openai_api_key:
            msg = "RecommendationClient requires an OpenAI API key; use mock mode without one."
            raise ValueError(msg)
        self._owns_client = llm_client is None
        self._llm = llm_client or LLMClient(
            api_key=settings.openai_api_key or "",
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=settings.request_timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._llm.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def recommend(self, snapshot: MarketSnapshot) -> Recommendation:
        """Generate a recommendation for *snapshot*.

        Raises:
            RecommendationError: If the endpoint fails, returns no content,
                or returns content that does not decode into the expected
                JSON shape.
        """
        ticker = snapshot.ticker
        messages = prompt_to_chat(build_recommendation_messages(snapshot))
        logger.debug(
            "Requesting recommendation for %s (prompt %s, model %s)",
            ticker,
            PROMPT_VERSION,
            self._llm.model,
        )

        try:
            response = await self._llm.chat(messages)
        except TimeoutError as exc:
            logger.error("Recommendation request timed out for %s", ticker)
            raise RecommendationError(
                f"Failed to generate AI recommendation for {ticker}: request timed out",
                ticker=ticker,
                model=self._llm.model,
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Recommendation endpoint returned HTTP %d for %s",
                exc.response.status_code,
                ticker,
            )
            raise RecommendationError(
                f"Failed to generate AI recommendation for {ticker}: "
                f"model API returned HTTP {exc.response.status_code}",
                ticker=ticker,
                model=self._llm.model,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Recommendation request failed for %s: %r", ticker, exc)
            raise RecommendationError(
                f"Failed to generate AI recommendation for {ticker}: {exc}",
                ticker=ticker,
                model=self._llm.model,
            ) from exc

        if not response.content:
            logger.error("Empty model response for %s", ticker)
            raise RecommendationError(
                f"No response from model for {ticker}",
                ticker=ticker,
                model=response.model,
            )

        result = decode_recommendation(response.content, model_used=response.model)
        if isinstance(result, ParseFailure):
            logger.error("Invalid model response for %s: %s", ticker, result.error)
            raise RecommendationError(
                f"Invalid response format from model for {ticker}: {result.error}",
                ticker=ticker,
                model=response.model,
            )

        recommendation = result.recommendation
        logger.info(
            "Recommendation for %s: %s (confidence=%d, risk=%s)",
            ticker,
            recommendation.recommendation.value,
            recommendation.confidence,
            recommendation.risk_level.value,
        )
        return recommendation
