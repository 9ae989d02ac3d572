"""API response models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from handoff.engine.monitor import LogEntry
from handoff.models.assets import ResourceMetrics
from handoff.models.blueprint import Blueprint
from handoff.models.diagnosis import ErrorClassification
from handoff.models.results import ParsedFile


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    env: str = "development"
    model_configured: bool = False


class AssetInfo(BaseModel):
    id: str
    name: str = ""
    raw_size: int = 0
    encoded_size: int = 0


class AssetsResponse(BaseModel):
    assets: list[AssetInfo] = Field(default_factory=list)
    metrics: ResourceMetrics


class PipelineStateResponse(BaseModel):
    state: str
    progress: int = 0
    blueprint: Blueprint | None = None
    has_result: bool = False
    files: list[ParsedFile] = Field(default_factory=list)
    failed_phase: str | None = None
    diagnosis: ErrorClassification | None = None
    metrics: ResourceMetrics


class CheckpointSummary(BaseModel):
    id: str
    timestamp: datetime
    summary: str = ""
    asset_count: int = 0
    file_count: int = 0


class CheckpointsResponse(BaseModel):
    checkpoints: list[CheckpointSummary] = Field(default_factory=list)


class LogsResponse(BaseModel):
    entries: list[LogEntry] = Field(default_factory=list)
