"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from handoff.api import assets, health, history, pipeline

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(assets.router)
api_router.include_router(pipeline.router)
api_router.include_router(history.router)
