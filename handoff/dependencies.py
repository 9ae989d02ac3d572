"""FastAPI dependency injection."""

from __future__ import annotations

from pathlib import Path

from handoff.config import settings
from handoff.engine.checkpoints import CheckpointStore
from handoff.engine.chunker import ImageChunker
from handoff.engine.controller import StageController
from handoff.engine.monitor import Monitor
from handoff.llm.gateway import AnthropicGateway

# One controller per process: pipeline runs never overlap.
_controller: StageController | None = None


def get_settings():
    return settings


def get_controller() -> StageController:
    global _controller
    if _controller is None:
        checkpoint_path = Path(settings.checkpoint_file) if settings.checkpoint_file else None
        _controller = StageController(
            gateway=AnthropicGateway(settings),
            monitor=Monitor(),
            chunker=ImageChunker(
                device_pixel_ratio=settings.device_pixel_ratio,
                max_chunks=settings.max_chunks_per_asset,
            ),
            checkpoints=CheckpointStore(checkpoint_path),
        )
    return _controller
