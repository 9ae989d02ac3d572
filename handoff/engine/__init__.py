"""Handoff pipeline engine — chunking, governance, staging/synthesis control."""

from handoff.engine.checkpoints import CheckpointStore
from handoff.engine.chunker import ImageChunker
from handoff.engine.controller import Phase, StageController
from handoff.engine.diagnosis import classify
from handoff.engine.governor import compute_metrics
from handoff.engine.monitor import LogLevel, Monitor
from handoff.engine.parser import FileReconstructor, parse_files

__all__ = [
    "CheckpointStore",
    "ImageChunker",
    "Phase",
    "StageController",
    "classify",
    "compute_metrics",
    "LogLevel",
    "Monitor",
    "FileReconstructor",
    "parse_files",
]
