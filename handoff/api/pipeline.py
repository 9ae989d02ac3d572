"""Pipeline endpoints — staging, launch, eject, retry, state (standard + streaming)."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from handoff.dependencies import get_controller
from handoff.engine.controller import StageController
from handoff.engine.errors import HandoffError
from handoff.models.options import ConversionOption, ConversionSettings
from handoff.models.requests import OptionUpdateRequest
from handoff.models.responses import PipelineStateResponse

router = APIRouter()

_SENTINEL = object()  # marks end of queue

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def state_response(controller: StageController) -> PipelineStateResponse:
    return PipelineStateResponse(
        state=controller.state.value,
        progress=controller.progress,
        blueprint=controller.blueprint,
        has_result=controller.result is not None,
        files=controller.files,
        failed_phase=controller.failed_phase.value if controller.failed_phase else None,
        diagnosis=controller.diagnosis,
        metrics=controller.metrics,
    )


async def _stream_phase(
    controller: StageController,
    run: Callable[[Callable[[int], None]], Awaitable[Any]],
) -> AsyncGenerator[str, None]:
    """Run one phase, yielding SSE progress events as the controller reports them."""
    queue: asyncio.Queue = asyncio.Queue()

    async def _drive() -> None:
        try:
            await run(queue.put_nowait)
        finally:
            queue.put_nowait(_SENTINEL)

    task = asyncio.create_task(_drive())
    try:
        while True:
            item = await queue.get()
            if item is _SENTINEL:
                break
            yield f"event: progress\ndata: {json.dumps({'progress': item})}\n\n"
        await task
    except HandoffError as e:
        data = json.dumps({"type": "error", "message": str(e)})
        yield f"event: error\ndata: {data}\n\n"

    result = state_response(controller).model_dump(mode="json", by_alias=True)
    yield f"event: result\ndata: {json.dumps(result)}\n\n"
    yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"


@router.get("/state", response_model=PipelineStateResponse)
async def get_state(controller: StageController = Depends(get_controller)) -> PipelineStateResponse:
    return state_response(controller)


@router.post("/staging", response_model=PipelineStateResponse)
async def start_staging(controller: StageController = Depends(get_controller)) -> PipelineStateResponse:
    await controller.start_staging()
    return state_response(controller)


@router.post("/staging/stream")
async def start_staging_stream(controller: StageController = Depends(get_controller)) -> StreamingResponse:
    return StreamingResponse(
        _stream_phase(controller, controller.start_staging),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


@router.post("/launch", response_model=PipelineStateResponse)
async def launch(controller: StageController = Depends(get_controller)) -> PipelineStateResponse:
    await controller.launch()
    return state_response(controller)


@router.post("/launch/stream")
async def launch_stream(controller: StageController = Depends(get_controller)) -> StreamingResponse:
    return StreamingResponse(
        _stream_phase(controller, controller.launch),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


@router.post("/eject", response_model=PipelineStateResponse)
async def eject(controller: StageController = Depends(get_controller)) -> PipelineStateResponse:
    controller.eject()
    return state_response(controller)


@router.post("/retry", response_model=PipelineStateResponse)
async def retry(controller: StageController = Depends(get_controller)) -> PipelineStateResponse:
    await controller.retry()
    return state_response(controller)


@router.get("/settings", response_model=ConversionSettings)
async def get_options(controller: StageController = Depends(get_controller)) -> ConversionSettings:
    return controller.options


@router.put("/settings/{option}", response_model=ConversionSettings)
async def set_option(
    option: ConversionOption,
    req: OptionUpdateRequest,
    controller: StageController = Depends(get_controller),
) -> ConversionSettings:
    return controller.set_option(option, req.enabled)
