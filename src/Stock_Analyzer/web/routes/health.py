"""Health route: liveness plus the data mode the pipeline will use."""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from Stock_Analyzer.config import Settings
from Stock_Analyzer.web.deps import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service status and whether runs hit live vendors or the mock generator."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    mode: Literal["live", "mock"]
    model: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    return HealthResponse(
        mode="mock" if settings.mock_mode else "live",
        model=settings.openai_model,
    )
