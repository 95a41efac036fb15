"""Runtime configuration for the analysis pipeline.

Settings are resolved once (normally from the environment) and passed
explicitly into every client constructor.  No module reads API keys on its
own.  Missing vendor or model keys are not an error: they switch the
pipeline into mock mode.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from pydantic import (
    AliasChoices,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from Stock_Analyzer.models.enums import MarketDataVariant

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_POLYGON_BASE_URL: Final[str] = "https://api.polygon.io"
DEFAULT_OPENAI_BASE_URL: Final[str] = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL: Final[str] = "gpt-4o-mini"
DEFAULT_LOOKBACK_DAYS: Final[int] = 7
DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0
DEFAULT_MAX_RETRIES: Final[int] = 1
DEFAULT_MAX_CONCURRENCY: Final[int] = 1
DEFAULT_MOCK_DELAY_SECONDS: Final[float] = 1.5


class Settings(BaseSettings):
    """Resolved configuration for vendors, timeouts and the analysis run.

    Each field is read from the upper-cased environment variable of the same
    name, except ``lookback_days`` which reads ``MARKET_DATA_LOOKBACK_DAYS``.
    Empty variables count as unset.  Frozen so one value can be shared
    between the web app, the CLI and the clients.
    """

    model_config = SettingsConfigDict(frozen=True, env_ignore_empty=True)

    polygon_api_key: str | None = None
    openai_api_key: str | None = None
    polygon_base_url: str = DEFAULT_POLYGON_BASE_URL
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    market_data_variant: MarketDataVariant = MarketDataVariant.AGGREGATES
    lookback_days: int = Field(
        default=DEFAULT_LOOKBACK_DAYS,
        ge=2,
        validation_alias=AliasChoices("lookback_days", "MARKET_DATA_LOOKBACK_DAYS"),
    )
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    mock_delay_seconds: float = Field(default=DEFAULT_MOCK_DELAY_SECONDS, ge=0)

    @field_validator("polygon_api_key", "openai_api_key", mode="before")
    @classmethod
    def empty_key_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("market_data_variant", mode="before")
    @classmethod
    def normalize_variant(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator(
        "market_data_variant",
        "lookback_days",
        "request_timeout",
        "max_retries",
        "max_concurrency",
        "mock_delay_seconds",
        mode="wrap",
    )
    @classmethod
    def fall_back_to_default(
        cls,
        v: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        """Replace an unparseable or out-of-range value with the field default."""
        try:
            return handler(v)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning("Invalid value for %s=%r, using default %s", info.field_name, v, default)
            return default

    @property
    def mock_mode(self) -> bool:
        """True unless both the market-data and the model API keys are set."""
        return not (self.polygon_api_key and self.openai_api_key)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the process environment and log the resolved mode."""
        settings = cls()
        logger.info(
            "Settings loaded: mode=%s variant=%s model=%s",
            "mock" if settings.mock_mode else "live",
            settings.market_data_variant.value,
            settings.openai_model,
        )
        return settings

    def masked(self) -> dict[str, str]:
        """Return a display-safe dict of settings with API keys masked."""
        data = self.model_dump(mode="json")
        for key in ("polygon_api_key", "openai_api_key"):
            data[key] = _mask(data.get(key))
        return {k: str(v) for k, v in data.items()}


def _mask(value: str | None) -> str:
    if not value:
        return "not configured"
    return f"{value[:4]}..." if len(value) > 8 else "***"  # noqa: PLR2004
