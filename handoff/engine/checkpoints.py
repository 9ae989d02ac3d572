"""Checkpoint store — bounded, newest-first history of synthesis runs.

Optionally mirrored to a JSON file so the history survives restarts.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from handoff.engine.errors import NotFoundError
from handoff.models.results import Checkpoint, ParsedFile

logger = logging.getLogger(__name__)

CHECKPOINT_CAPACITY = 10


class CheckpointStore:
    def __init__(self, path: Path | None = None, capacity: int = CHECKPOINT_CAPACITY) -> None:
        self.path = path
        self.capacity = capacity
        self._entries: list[Checkpoint] = self._load() if path is not None else []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, checkpoint: Checkpoint) -> None:
        """Insert at the front; anything past capacity is dropped."""
        self._entries = [checkpoint, *self._entries][: self.capacity]
        if self.path is not None:
            self._save()

    def list(self) -> list[Checkpoint]:
        return list(self._entries)

    def get(self, checkpoint_id: str) -> Checkpoint:
        for entry in self._entries:
            if entry.id == checkpoint_id:
                return entry
        raise NotFoundError(f"No checkpoint with id {checkpoint_id}")

    def select(self, checkpoint: Checkpoint | str) -> str:
        """Raw result of a stored checkpoint, for restoring it into the active view."""
        checkpoint_id = checkpoint if isinstance(checkpoint, str) else checkpoint.id
        return self.get(checkpoint_id).raw_result

    def _load(self) -> list[Checkpoint]:
        assert self.path is not None
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        entries = [Checkpoint.model_validate(item) for item in data]
        logger.info("Loaded %d checkpoints from %s", len(entries), self.path)
        return entries[: self.capacity]

    def _save(self) -> None:
        assert self.path is not None
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(
                [entry.model_dump(mode="json") for entry in self._entries],
                f,
                indent=2,
                ensure_ascii=False,
            )


def make_checkpoint(
    raw_result: str,
    files: list[ParsedFile],
    asset_count: int,
    summary: str,
) -> Checkpoint:
    return Checkpoint(
        id=uuid.uuid4().hex[:9],
        timestamp=datetime.now(timezone.utc),
        raw_result=raw_result,
        files=tuple(files),
        asset_count=asset_count,
        summary=summary,
    )
