"""Market data model: a normalized per-ticker snapshot.

All price fields use Decimal (constructed from strings) with custom
serializers that round to cents at the output boundary only.  Internal
arithmetic keeps full precision.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator, model_validator

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


def round_cents(value: Decimal) -> Decimal:
    """Round *value* half-up to two decimal places for display."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value: object) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class MarketSnapshot(BaseModel):
    """One normalized market-data reading for a ticker at request time.

    ``change`` and ``change_percent`` are derived from ``price`` and
    ``previous_close`` during validation; any values supplied for them are
    discarded.  Frozen because a snapshot is a point-in-time reading.
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    price: Decimal
    change: Decimal = _ZERO
    change_percent: Decimal = _ZERO
    volume: int
    open: Decimal | None = None
    high: Decimal | None = None
    low: Decimal | None = None
    previous_close: Decimal | None = None
    market_cap: Decimal | None = None

    @model_validator(mode="before")
    @classmethod
    def derive_change(cls, data: Any) -> Any:
        """Compute change fields from price and previous close.

        A zero or absent previous close yields a zero percentage instead
        of a division error.  Unparseable prices are left for field
        validation to report.
        """
        if not isinstance(data, dict):
            return data
        values = dict(data)
        price = _to_decimal(values.get("price"))
        previous_close = _to_decimal(values.get("previous_close"))

        change = _ZERO
        change_percent = _ZERO
        if price is not None and previous_close is not None:
            change = price - previous_close
            if previous_close != _ZERO:
                change_percent = change / previous_close * _HUNDRED

        values["change"] = change
        values["change_percent"] = change_percent
        return values

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, value: str) -> str:
        """Tickers are always stored uppercase without surrounding whitespace."""
        return value.strip().upper()

    @field_validator("price", "open", "high", "low", "previous_close", "market_cap")
    @classmethod
    def reject_non_finite(cls, value: Decimal | None) -> Decimal | None:
        """NaN and infinite prices are vendor garbage, not market data."""
        if value is not None and not value.is_finite():
            msg = f"price fields must be finite, got {value}"
            raise ValueError(msg)
        return value

    @field_serializer(
        "price",
        "change",
        "change_percent",
        "open",
        "high",
        "low",
        "previous_close",
        "market_cap",
    )
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal fields as cent-rounded strings."""
        if value is None:
            return None
        return str(round_cents(value))

    @property
    def is_up(self) -> bool:
        """True when the snapshot shows a non-negative change."""
        return self.change >= _ZERO
