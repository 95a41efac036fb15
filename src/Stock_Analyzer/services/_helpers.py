"""Shared helpers for vendor-backed service modules.

Consolidates safe type conversions for loosely-typed vendor JSON and the
timeout-then-retry pattern used for idempotent market-data reads.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Coroutine
from decimal import Decimal, InvalidOperation
from typing import Any, Final

import httpx

from Stock_Analyzer.utils.exceptions import DataFetchError, DataSourceUnavailableError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

POLYGON_SOURCE: Final[str] = "polygon"

# One retry by default; reads are idempotent so a second attempt is safe
MAX_RETRIES: Final[int] = 1
BACKOFF_DELAYS: Final[list[float]] = [1.0, 2.0]

_RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    TimeoutError,
    httpx.TransportError,
)


# ---------------------------------------------------------------------------
# Safe type conversions
# ---------------------------------------------------------------------------


def optional_decimal(value: object) -> Decimal | None:
    """Convert a numeric value to Decimal via string to preserve precision.

    Returns ``None`` for None / NaN / infinite / unparseable values so that
    optional vendor fields stay absent instead of becoming zero.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def safe_int(value: object) -> int:
    """Whole-number vendor field (volume); None, NaN, inf and garbage become 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(str(value))
    except ValueError:
        return 0
    return int(number) if math.isfinite(number) else 0


# ---------------------------------------------------------------------------
# Retry wrapper
# ---------------------------------------------------------------------------


async def fetch_with_retry[T](
    fetch_fn: Callable[[], Coroutine[Any, Any, T]],
    *,
    ticker: str,
    source: str,
    label: str,
    max_retries: int = MAX_RETRIES,
    backoff_delays: list[float] | None = None,
) -> T:
    """Run a fetch coroutine, retrying transport failures and timeouts.

    Domain exceptions (any ``DataFetchError``) are re-raised immediately.
    HTTP status handling is the caller's job: a response is a success as
    far as this wrapper is concerned.

    Args:
        fetch_fn: Zero-argument callable returning a coroutine.
        ticker: Ticker symbol for error context.
        source: Data source name for error context.
        label: Human-readable label for log messages.
        max_retries: Retries after the first attempt (default 1).
        backoff_delays: Delay schedule in seconds (default [1.0, 2.0]).

    Returns:
        Whatever *fetch_fn* returns.

    Raises:
        DataSourceUnavailableError: After exhausting all attempts.
    """
    delays = backoff_delays if backoff_delays is not None else BACKOFF_DELAYS
    total_attempts = 1 + max_retries
    last_exc: BaseException | None = None

    for attempt in range(total_attempts):
        try:
            return await fetch_fn()
        except DataFetchError:
            raise
        except _RETRYABLE_EXCEPTIONS as exc:
            last_exc = exc
            logger.warning(
                "%s failed (attempt %d/%d): %r",
                label,
                attempt + 1,
                total_attempts,
                exc,
            )

        # Backoff before next retry (not after the last attempt)
        if attempt < total_attempts - 1 and delays:
            delay = delays[attempt] if attempt < len(delays) else delays[-1]
            await asyncio.sleep(delay)

    assert last_exc is not None  # noqa: S101
    raise DataSourceUnavailableError(
        f"Failed to fetch {label} after {total_attempts} attempts: {last_exc!r}",
        ticker=ticker,
        source=source,
    ) from last_exc
