"""Checkpoint history and activity log endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from handoff.api.pipeline import state_response
from handoff.dependencies import get_controller
from handoff.engine.controller import StageController
from handoff.models.responses import (
    CheckpointsResponse,
    CheckpointSummary,
    LogsResponse,
    PipelineStateResponse,
)

router = APIRouter()


@router.get("/checkpoints", response_model=CheckpointsResponse)
async def list_checkpoints(controller: StageController = Depends(get_controller)) -> CheckpointsResponse:
    return CheckpointsResponse(
        checkpoints=[
            CheckpointSummary(
                id=cp.id,
                timestamp=cp.timestamp,
                summary=cp.summary,
                asset_count=cp.asset_count,
                file_count=cp.file_count,
            )
            for cp in controller.checkpoints.list()
        ]
    )


@router.post("/checkpoints/{checkpoint_id}/select", response_model=PipelineStateResponse)
async def select_checkpoint(
    checkpoint_id: str,
    controller: StageController = Depends(get_controller),
) -> PipelineStateResponse:
    controller.select_checkpoint(checkpoint_id)
    return state_response(controller)


@router.get("/logs", response_model=LogsResponse)
async def logs(controller: StageController = Depends(get_controller)) -> LogsResponse:
    return LogsResponse(entries=controller.monitor.entries)
