"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from handoff.config import Settings
from handoff.dependencies import get_settings
from handoff.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(config: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        env=config.handoff_env,
        model_configured=bool(config.anthropic_api_key),
    )
