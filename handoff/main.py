"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from handoff.config import settings
from handoff.engine.errors import NotFoundError, PipelineStateError, ResourceSaturatedError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.handoff_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Project Handoff",
        description="Chat screenshots → project blueprint → source files",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    from handoff.api.router import api_router

    app.include_router(api_router)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    """Map controller guard failures onto HTTP status codes."""

    @app.exception_handler(PipelineStateError)
    async def _state_error(request: Request, exc: PipelineStateError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ResourceSaturatedError)
    async def _saturated(request: Request, exc: ResourceSaturatedError) -> JSONResponse:
        return JSONResponse(status_code=423, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})


app = create_app()
