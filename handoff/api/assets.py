"""Asset ingestion endpoints — upload, list, remove, clear, metrics."""

from __future__ import annotations

import binascii

from fastapi import APIRouter, Depends, HTTPException

from handoff.dependencies import get_controller
from handoff.engine.controller import StageController
from handoff.models.assets import Asset, ResourceMetrics
from handoff.models.requests import AssetUploadRequest
from handoff.models.responses import AssetInfo, AssetsResponse

router = APIRouter()


def _assets_response(controller: StageController) -> AssetsResponse:
    return AssetsResponse(
        assets=[
            AssetInfo(id=a.id, name=a.name, raw_size=a.raw_size, encoded_size=a.encoded_size)
            for a in controller.assets
        ],
        metrics=controller.metrics,
    )


@router.get("/assets", response_model=AssetsResponse)
async def list_assets(controller: StageController = Depends(get_controller)) -> AssetsResponse:
    return _assets_response(controller)


@router.post("/assets", response_model=AssetsResponse)
async def add_asset(
    req: AssetUploadRequest,
    controller: StageController = Depends(get_controller),
) -> AssetsResponse:
    try:
        asset = Asset.from_base64(req.data, name=req.name)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid base64 payload: {e}") from e
    controller.add_asset(asset)
    return _assets_response(controller)


@router.delete("/assets/{asset_id}", response_model=AssetsResponse)
async def remove_asset(asset_id: str, controller: StageController = Depends(get_controller)) -> AssetsResponse:
    controller.remove_asset(asset_id)
    return _assets_response(controller)


@router.delete("/assets", response_model=AssetsResponse)
async def clear_assets(controller: StageController = Depends(get_controller)) -> AssetsResponse:
    controller.clear_assets()
    return _assets_response(controller)


@router.get("/metrics", response_model=ResourceMetrics)
async def metrics(controller: StageController = Depends(get_controller)) -> ResourceMetrics:
    return controller.metrics
