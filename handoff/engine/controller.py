"""Stage controller — sequences the two-phase handoff pipeline.

    IDLE ──start_staging──▶ STAGING ──▶ STAGED ──launch──▶ SYNTHESIZING ──▶ COMPLETE
      ▲                        │           │                    │
      └────────eject───────────┼───────────┘                    │
                               └──────────▶ ERROR ◀──────────────┘
                                             │ retry re-runs the failed phase

COMPLETE is "idle with a result": it accepts a new ``start_staging``.
Only one model call is ever in flight: the phase methods await chunking and
the gateway strictly in sequence, and every entry point is rejected while a
phase is running.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING

from handoff.engine.checkpoints import CheckpointStore, make_checkpoint
from handoff.engine.chunker import ImageChunker
from handoff.engine.diagnosis import classify
from handoff.engine.errors import NotFoundError, PipelineStateError, ResourceSaturatedError
from handoff.engine.governor import compute_metrics
from handoff.engine.monitor import LogLevel, Monitor
from handoff.engine.parser import parse_files
from handoff.models.assets import Asset, Chunk, ResourceMetrics
from handoff.models.blueprint import Blueprint
from handoff.models.diagnosis import ErrorClassification
from handoff.models.options import ConversionOption, ConversionSettings
from handoff.models.results import ParsedFile

if TYPE_CHECKING:
    from handoff.llm.gateway import ModelGateway

logger = logging.getLogger(__name__)

# Share of the progress bar spent on chunking in each phase; the model call
# fills the rest.
STAGING_CHUNK_SPAN = 40
SYNTHESIS_CHUNK_SPAN = 50


class Phase(str, enum.Enum):
    IDLE = "idle"
    STAGING = "staging"
    STAGED = "staged"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    ERROR = "error"


_BUSY = (Phase.STAGING, Phase.SYNTHESIZING)

ProgressListener = Callable[[int], None]


class StageController:
    def __init__(
        self,
        gateway: ModelGateway,
        monitor: Monitor | None = None,
        chunker: ImageChunker | None = None,
        checkpoints: CheckpointStore | None = None,
        options: ConversionSettings | None = None,
    ) -> None:
        self.gateway = gateway
        self.monitor = monitor or Monitor()
        self.chunker = chunker or ImageChunker()
        self.checkpoints = checkpoints if checkpoints is not None else CheckpointStore()
        self.options = options or ConversionSettings()
        self._progress_listeners: list[ProgressListener] = []

        self.state = Phase.IDLE
        self.progress = 0
        self.blueprint: Blueprint | None = None
        self.result: str | None = None
        self.files: list[ParsedFile] = []
        self.error: str | None = None
        self.diagnosis: ErrorClassification | None = None
        self.failed_phase: Phase | None = None
        self._assets: list[Asset] = []

    # ── Assets ──

    @property
    def assets(self) -> tuple[Asset, ...]:
        return tuple(self._assets)

    @property
    def metrics(self) -> ResourceMetrics:
        return compute_metrics(self._assets)

    @property
    def is_busy(self) -> bool:
        return self.state in _BUSY

    def add_asset(self, asset: Asset) -> ResourceMetrics:
        """Accept an asset; still accepted when critical so the set can be inspected."""
        self._require_not_busy("add assets")
        self._assets.append(asset)
        self.monitor.log(LogLevel.INFO, f"Added asset: {asset.name or asset.id}")
        metrics = self.metrics
        if metrics.is_critical:
            self.monitor.log(
                LogLevel.WARNING,
                "Memory ceiling reached; remove assets or clear the set before staging",
                details=f"{metrics.total_bytes} bytes across {metrics.asset_count} assets",
            )
        return metrics

    def remove_asset(self, asset_id: str) -> ResourceMetrics:
        self._require_not_busy("remove assets")
        remaining = [a for a in self._assets if a.id != asset_id]
        if len(remaining) == len(self._assets):
            raise NotFoundError(f"No asset with id {asset_id}")
        self._assets = remaining
        self.monitor.log(LogLevel.INFO, f"Removed asset: {asset_id}")
        return self.metrics

    def clear_assets(self) -> ResourceMetrics:
        """Explicit reset of the asset set."""
        self._require_not_busy("clear assets")
        self._assets = []
        self.monitor.log(LogLevel.INFO, "Asset set cleared")
        return self.metrics

    # ── Options ──

    def set_option(self, option: ConversionOption, enabled: bool) -> ConversionSettings:
        self._require_not_busy("change settings")
        self.options = self.options.with_option(option, enabled)
        return self.options

    def toggle_option(self, option: ConversionOption) -> ConversionSettings:
        return self.set_option(option, not self.options.is_enabled(option))

    # ── Progress ──

    def subscribe_progress(self, listener: ProgressListener) -> Callable[[], None]:
        """Receive every progress value of every run until unsubscribed."""
        self._progress_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._progress_listeners:
                self._progress_listeners.remove(listener)

        return unsubscribe

    @contextlib.contextmanager
    def _listening(self, listener: ProgressListener | None) -> Iterator[None]:
        if listener is None:
            yield
            return
        unsubscribe = self.subscribe_progress(listener)
        try:
            yield
        finally:
            unsubscribe()

    # ── Transitions ──
    #
    # ``on_progress`` is attached only once the guards have passed, so a
    # rejected call never sees progress from a run it did not start.

    async def start_staging(self, on_progress: ProgressListener | None = None) -> Blueprint | None:
        """IDLE/COMPLETE/ERROR → STAGING → STAGED (or ERROR).

        Returns the blueprint, or None when the phase failed (see ``diagnosis``).
        """
        self._require((Phase.IDLE, Phase.COMPLETE, Phase.ERROR), "start staging")
        if not self._assets:
            raise PipelineStateError("Cannot start staging without assets")
        self._require_capacity()
        with self._listening(on_progress):
            return await self._run_staging()

    async def launch(self, on_progress: ProgressListener | None = None) -> list[ParsedFile] | None:
        """STAGED → SYNTHESIZING → COMPLETE (or ERROR)."""
        self._require((Phase.STAGED,), "launch")
        if self.blueprint is None:
            raise PipelineStateError("Cannot launch without a staged blueprint")
        self._require_capacity()
        with self._listening(on_progress):
            return await self._run_synthesis()

    def eject(self) -> None:
        """STAGED → IDLE, discarding the blueprint without a model call."""
        self._require((Phase.STAGED,), "eject")
        self.blueprint = None
        self.state = Phase.IDLE
        self.progress = 0
        self.monitor.log(LogLevel.INFO, "Blueprint ejected")

    async def retry(
        self, on_progress: ProgressListener | None = None
    ) -> Blueprint | list[ParsedFile] | None:
        """ERROR → the phase that failed. Synthesis retries reuse the held blueprint."""
        self._require((Phase.ERROR,), "retry")
        self._require_capacity()
        if self.failed_phase is Phase.SYNTHESIZING and self.blueprint is not None:
            with self._listening(on_progress):
                return await self._run_synthesis()
        if not self._assets:
            raise PipelineStateError("Cannot retry staging without assets")
        with self._listening(on_progress):
            return await self._run_staging()

    def select_checkpoint(self, checkpoint_id: str) -> str:
        """Restore a stored result into the active view."""
        self._require_not_busy("select a checkpoint")
        checkpoint = self.checkpoints.get(checkpoint_id)
        self.result = self.checkpoints.select(checkpoint)
        self.files = list(checkpoint.files)
        if self.state is Phase.IDLE:
            self.state = Phase.COMPLETE
        self.monitor.log(LogLevel.INFO, f"Restored checkpoint: {checkpoint.summary}")
        return self.result

    # ── Phases ──

    async def _run_staging(self) -> Blueprint | None:
        self.blueprint = None
        self._begin(Phase.STAGING)
        self.monitor.log(LogLevel.INFO, "Preparing handoff: reading conversation context...")
        try:
            chunks = await self._chunk_assets(STAGING_CHUNK_SPAN)
            blueprint = await self.gateway.analyze(chunks, self.options.instruction_mode)
        except Exception as e:
            self._fail(Phase.STAGING, e)
            return None

        self.blueprint = blueprint
        self._set_progress(100)
        self.state = Phase.STAGED
        self.monitor.log(
            LogLevel.SUCCESS,
            f"Blueprint ready: {blueprint.project_name} ({len(blueprint.modules)} modules)",
        )
        return blueprint

    async def _run_synthesis(self) -> list[ParsedFile] | None:
        blueprint = self.blueprint
        assert blueprint is not None
        self._begin(Phase.SYNTHESIZING)
        self.monitor.log(LogLevel.INFO, "Executing handoff: writing project files...")
        try:
            chunks = await self._chunk_assets(SYNTHESIS_CHUNK_SPAN)
            raw = await self.gateway.synthesize(
                chunks, blueprint, self.options.instruction_mode, self.options
            )
            files = parse_files(raw)
            self.checkpoints.append(
                make_checkpoint(
                    raw_result=raw,
                    files=files,
                    asset_count=len(self._assets),
                    summary=f"Handoff: {blueprint.project_name}",
                )
            )
        except Exception as e:
            self._fail(Phase.SYNTHESIZING, e)
            return None

        self.result = raw
        self.files = files
        self.blueprint = None
        self._set_progress(100)
        self.state = Phase.COMPLETE
        self.monitor.log(LogLevel.SUCCESS, f"Project handoff complete: {len(files)} files")
        return files

    async def _chunk_assets(self, span: int) -> list[Chunk]:
        assets: Sequence[Asset] = list(self._assets)
        total = len(assets) or 1
        chunks: list[Chunk] = []
        for i, asset in enumerate(assets):
            chunks.extend(await asyncio.to_thread(self.chunker.chunk, asset))
            self._set_progress(span * (i + 1) // total)
        logger.debug("Chunked %d assets into %d chunks", len(assets), len(chunks))
        return chunks

    # ── Helpers ──

    def _begin(self, phase: Phase) -> None:
        self.state = phase
        self.progress = 0
        self.error = None
        self.diagnosis = None
        self.failed_phase = None
        self._emit_progress()

    def _fail(self, phase: Phase, exc: Exception) -> None:
        self.error = str(exc)
        self.diagnosis = classify(self.error)
        self.failed_phase = phase
        self.state = Phase.ERROR
        self.monitor.log(
            LogLevel.ERROR,
            f"{phase.value.capitalize()} failed: {self.diagnosis.title}",
            details=f"{self.diagnosis.code}: {self.error}",
        )

    def _set_progress(self, value: int) -> None:
        value = max(self.progress, min(100, int(value)))
        if value != self.progress:
            self.progress = value
            self._emit_progress()

    def _emit_progress(self) -> None:
        for listener in list(self._progress_listeners):
            try:
                listener(self.progress)
            except Exception as e:
                logger.warning("Progress listener %r failed: %s", listener, e)

    def _require(self, allowed: tuple[Phase, ...], action: str) -> None:
        if self.state not in allowed:
            raise PipelineStateError(f"Cannot {action} while {self.state.value}")

    def _require_not_busy(self, action: str) -> None:
        if self.is_busy:
            raise PipelineStateError(f"Cannot {action} while {self.state.value}")

    def _require_capacity(self) -> None:
        metrics = self.metrics
        if metrics.is_critical:
            self.monitor.log(LogLevel.WARNING, "Pipeline blocked: memory ceiling reached")
            raise ResourceSaturatedError(
                f"Assets occupy {metrics.total_bytes} bytes ({metrics.saturation:.0%} of the ceiling)"
            )
