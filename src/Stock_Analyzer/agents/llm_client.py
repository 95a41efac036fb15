"""Async client for OpenAI-compatible chat-completion endpoints.

Sends a single non-streaming ``POST {base_url}/chat/completions`` with a
bearer token and returns the first choice's content.  A
``<think>...</think>`` stripping pass runs on every response so reasoning
models served behind the same API still yield bare JSON.

Completions are not retried and the caller reports one failure per call.
Every request is bounded by ``asyncio.wait_for``.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from types import TracebackType
from typing import Any, Self

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL: str = "https://api.openai.com/v1"
DEFAULT_MODEL: str = "gpt-4o-mini"
DEFAULT_TIMEOUT: float = 60.0
DEFAULT_MAX_TOKENS: int = 500
DEFAULT_TEMPERATURE: float = 0.3

_THINK_TAG_RE: re.Pattern[str] = re.compile(r"<think>.*?</think>", re.DOTALL)

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """A single message in a chat-completion conversation."""

    role: str
    content: str


class LLMResponse(BaseModel):
    """Parsed response from a chat completion."""

    model_config = ConfigDict(frozen=True)

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    duration_ms: int


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class LLMClient:
    """Async wrapper around an OpenAI-compatible ``/chat/completions`` endpoint.

    Parameters
    ----------
    api_key:
        Bearer token sent in the ``Authorization`` header.
    base_url:
        API root, e.g. ``https://api.openai.com/v1`` or a local
        OpenAI-compatible server.
    model:
        Model name sent with every request.
    http_client:
        Optional pre-built ``httpx.AsyncClient``; not closed by ``aclose()``.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=5.0),
        )

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def chat(
        self,
        messages: list[ChatMessage],
        *,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Send one chat-completion request.

        Parameters
        ----------
        messages:
            Conversation history including the system message.
        timeout:
            Maximum wall-clock seconds to wait; defaults to the client's
            configured timeout.

        Returns
        -------
        LLMResponse
            Content of the first choice (empty string if absent), token
            counts, and wall-clock timing.

        Raises
        ------
        TimeoutError
            If the call exceeds *timeout* seconds.
        httpx.HTTPStatusError
            If the endpoint answers with a non-success status.
        httpx.HTTPError
            On transport failures.
        ValueError
            If the response body is not a JSON object.
        """
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        start = time.monotonic()
        response = await asyncio.wait_for(
            self._client.post(self._url, json=payload, headers=headers),
            timeout=timeout if timeout is not None else self._timeout,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            msg = f"Expected a JSON object from chat completions, got {type(data).__name__}"
            raise ValueError(msg)
        duration_ms = int((time.monotonic() - start) * 1000)

        content = _THINK_TAG_RE.sub("", _first_choice_content(data)).strip()
        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        input_tokens = _token_count(usage.get("prompt_tokens"))
        output_tokens = _token_count(usage.get("completion_tokens"))

        logger.info(
            "LLM response: model=%s input_tokens=%d output_tokens=%d duration_ms=%d",
            self._model,
            input_tokens,
            output_tokens,
            duration_ms,
        )

        return LLMResponse(
            content=content,
            model=str(data.get("model") or self._model),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )


def _first_choice_content(data: dict[str, Any]) -> str:
    """Return ``choices[0].message.content`` or an empty string."""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def _token_count(value: Any) -> int:
    """Non-negative int token count; anything else counts as 0."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    try:
        return max(int(value), 0)
    except (OverflowError, ValueError):
        return 0
