"""Synthesis results: reconstructed files and checkpoint snapshots."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ParsedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    language: str = "text"
    content: str = ""


class Checkpoint(BaseModel):
    """Immutable snapshot of one completed synthesis run."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    raw_result: str
    files: tuple[ParsedFile, ...] = Field(default_factory=tuple)
    asset_count: int = 0
    summary: str = ""

    @property
    def file_count(self) -> int:
        return len(self.files)
