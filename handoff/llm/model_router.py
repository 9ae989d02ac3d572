"""Task → model selection. Cheap model for staging, frontier model for synthesis."""

from __future__ import annotations

from handoff.config import Settings, settings

_TASK_MODEL_MAP = {
    "analyze": "cheap",
    "synthesize": "frontier",
}


def get_model_for_task(task: str, config: Settings | None = None) -> str:
    config = config or settings
    tier = _TASK_MODEL_MAP.get(task, "cheap")
    if tier == "cheap":
        return config.model_cheap
    else:
        return config.model_frontier
