"""Ticker watchlist: an ordered, de-duplicated set of uppercase symbols."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from Stock_Analyzer.utils.exceptions import InvalidTickerError

# 1-6 uppercase alphanumerics, dots allowed for share classes (BRK.B)
TICKER_PATTERN: re.Pattern[str] = re.compile(r"^[A-Z0-9.]{1,6}$")


def normalize_ticker(symbol: str) -> str:
    """Uppercase and validate *symbol*.

    Raises:
        InvalidTickerError: If the normalized symbol is empty or malformed.
    """
    normalized = symbol.strip().upper()
    if not TICKER_PATTERN.match(normalized):
        msg = f"Invalid ticker symbol: '{symbol}'. Must be 1-6 alphanumeric characters."
        raise InvalidTickerError(msg)
    return normalized


class TickerWatchlist:
    """User-controlled ordered set of tickers queued for analysis.

    Owns no derived data; the analysis session reads it at the start of
    each run.
    """

    def __init__(self, tickers: Iterable[str] = ()) -> None:
        self._tickers: list[str] = []
        for ticker in tickers:
            self.add(ticker)

    def add(self, symbol: str) -> bool:
        """Append *symbol* if absent.

        Returns:
            ``True`` if the ticker was added, ``False`` if it was already
            present (the list is left unchanged).
        """
        normalized = normalize_ticker(symbol)
        if normalized in self._tickers:
            return False
        self._tickers.append(normalized)
        return True

    def remove(self, symbol: str) -> bool:
        """Remove *symbol*; returns ``False`` if it was not on the list."""
        normalized = symbol.strip().upper()
        if normalized not in self._tickers:
            return False
        self._tickers.remove(normalized)
        return True

    def clear(self) -> None:
        self._tickers.clear()

    @property
    def tickers(self) -> list[str]:
        """A copy of the tickers in insertion order."""
        return list(self._tickers)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.strip().upper() in self._tickers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tickers))

    def __len__(self) -> int:
        return len(self._tickers)

    def __repr__(self) -> str:
        return f"TickerWatchlist({self._tickers!r})"
