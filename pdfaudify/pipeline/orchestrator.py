"""Pipeline orchestration for pdfaudify.

Responsibilities:
- Define the stage order for the PDF to narration flow: OCR, speech, concatenation.
- Build stage collaborators from configuration or injected test doubles.
- Map stage failures to `PipelineStageError` with actionable hints.

Key types:
- `PdfAudifyPipeline`: orchestration facade.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from ..audio.merger import AudioMerger
from ..config import PdfAudifyConfig
from ..errors import (
    InvalidInputError,
    PipelineStageError,
    RetryExhaustedError,
    TransientProviderError,
)
from ..io.storage import StorageGateway
from ..models.datatypes import Chunk, PipelinePaths, PipelineResult
from ..ocr.parser import load_ocr_document
from ..ocr.stage import OcrStage
from ..ocr.vision import OcrProvider
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..text.chunking import ChunkPlanner, chunk_output_path
from ..text.segmenter import SentenceSegmenter
from ..tts.stage import SpeechSynthesisStage
from ..tts.synthesizer import SpeechProvider
from .task_runner import BoundedTaskRunner

_StageResult = TypeVar("_StageResult")


class PdfAudifyPipeline:
    """Coordinate all stages for a single pdfaudify run."""

    _PHASE_SEQUENCE = ("ocr", "tts", "concat")

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        *,
        storage: StorageGateway | None = None,
        ocr_provider: OcrProvider | None = None,
        speech_provider: SpeechProvider | None = None,
    ) -> None:
        """Initialize optional logging, progress hooks, and collaborator overrides."""

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._storage = storage
        self._ocr_provider = ocr_provider
        self._speech_provider = speech_provider

    def run(self, config: PdfAudifyConfig) -> PipelineResult:
        """Run OCR, speech synthesis, and concatenation for one source PDF."""

        return asyncio.run(self.run_async(config))

    async def run_async(self, config: PdfAudifyConfig) -> PipelineResult:
        """Run the pipeline inside an already running event loop."""

        self._validate_config(config)
        paths = config.paths()
        storage = self._resolve_storage(config)

        shards = await self._run_stage("ocr", lambda: self._ocr(config, storage, paths))
        segments = await self._run_stage(
            "tts", lambda: self._tts(config, storage, paths, shards)
        )
        output_path = await self._run_stage(
            "concat", lambda: self._concat(config, storage, paths, segments)
        )
        if self._run_logger is not None:
            self._run_logger.log_event(
                "pipeline",
                "done",
                shards=len(shards),
                segments=len(segments),
                output=output_path,
            )
        return PipelineResult(
            paths=paths,
            ocr_shards=tuple(shards),
            audio_segments=tuple(segments),
            output_path=output_path,
        )

    def segment_file(self, ocr_json: Path, delimiter: str = "。") -> list[str]:
        """Return sentence fragments reconstructed from one local OCR JSON document."""

        try:
            raw_text = ocr_json.read_text(encoding="utf-8")
            return SentenceSegmenter(delimiter).segment(load_ocr_document(raw_text, str(ocr_json)))
        except FileNotFoundError as exc:
            raise PipelineStageError(
                stage="segment",
                detail=f"OCR document not found: `{ocr_json}`.",
                hint="Provide a path to a downloaded OCR JSON shard.",
            ) from exc
        except ValueError as exc:
            raise PipelineStageError(
                stage="segment",
                detail=str(exc),
                hint="Confirm the file is a document text detection output shard.",
            ) from exc

    def plan_file(
        self,
        ocr_json: Path,
        delimiter: str = "。",
        max_length: int = 5000,
        audio_prefix: str = "mp3",
    ) -> list[tuple[Chunk, str]]:
        """Return planned chunks and their output paths for one local OCR JSON document."""

        fragments = self.segment_file(ocr_json, delimiter)
        try:
            planner = ChunkPlanner(max_length)
        except ValueError as exc:
            raise PipelineStageError(
                stage="plan",
                detail=str(exc),
                hint="Pass a positive `--max-length`.",
            ) from exc
        return [
            (chunk, chunk_output_path(audio_prefix, chunk.number))
            for chunk in planner.plan(fragments)
        ]

    def _runner(self, config: PdfAudifyConfig, stage: str) -> BoundedTaskRunner:
        """Create a stage-scoped runner with the configured limits."""

        return BoundedTaskRunner(
            config.concurrency,
            config.max_attempts,
            stage=stage,
            run_logger=self._run_logger,
        )

    async def _ocr(
        self, config: PdfAudifyConfig, storage: StorageGateway, paths: PipelinePaths
    ) -> list[str]:
        """Produce or reuse OCR shards for the source PDF."""

        try:
            provider = self._ocr_provider or ProviderFactory.create_ocr_provider(config)
            stage = OcrStage(storage, provider, self._runner(config, "ocr"), self._run_logger)
            return await stage.run(paths.source_path, paths.ocr_prefix)
        except (RetryExhaustedError, TransientProviderError) as exc:
            raise PipelineStageError(
                stage="ocr",
                detail=str(exc),
                hint="Verify Cloud Vision and storage access, then rerun; finished work is kept.",
            ) from exc
        except InvalidInputError as exc:
            raise PipelineStageError(
                stage="ocr",
                detail=str(exc),
                hint=(
                    f"Confirm `{paths.source_path}` exists. Local runs need OCR shards "
                    f"under `{paths.ocr_prefix}`."
                ),
            ) from exc
        except PipelineStageError:
            raise
        except Exception as exc:
            raise PipelineStageError(
                stage="ocr",
                detail=f"Failed to produce OCR output: {exc}",
                hint="Check Google Cloud credentials and OCR configuration.",
            ) from exc

    async def _tts(
        self,
        config: PdfAudifyConfig,
        storage: StorageGateway,
        paths: PipelinePaths,
        shards: list[str],
    ) -> list[str]:
        """Synthesize one audio segment per planned chunk."""

        try:
            provider = self._speech_provider or ProviderFactory.create_speech_provider(config)
            stage = SpeechSynthesisStage(
                storage,
                provider,
                self._runner(config, "tts"),
                segmenter=SentenceSegmenter(config.delimiter),
                planner=ChunkPlanner(config.max_length),
                voice=config.voice_settings(),
                run_logger=self._run_logger,
            )
            segments = await stage.run(shards, paths.audio_prefix)
        except (RetryExhaustedError, TransientProviderError) as exc:
            raise PipelineStageError(
                stage="tts",
                detail=str(exc),
                hint="Verify Text-to-Speech access and quota, then rerun; finished segments are kept.",
            ) from exc
        except InvalidInputError as exc:
            raise PipelineStageError(
                stage="tts",
                detail=str(exc),
                hint=f"Remove malformed OCR shards under `{paths.ocr_prefix}` and rerun OCR.",
            ) from exc
        except Exception as exc:
            raise PipelineStageError(
                stage="tts",
                detail=f"Failed to synthesize audio segments: {exc}",
                hint="Check voice settings and Google Cloud credentials.",
            ) from exc

        if not segments:
            raise PipelineStageError(
                stage="tts",
                detail=f"OCR output under `{paths.ocr_prefix}` contains no text.",
                hint="Confirm the PDF holds readable page images.",
            )
        return segments

    async def _concat(
        self,
        config: PdfAudifyConfig,
        storage: StorageGateway,
        paths: PipelinePaths,
        segments: list[str],
    ) -> str:
        """Merge audio segments into the final output object."""

        try:
            merger = AudioMerger(
                storage,
                self._runner(config, "concat"),
                max_combine=config.max_combine,
                single_member_policy=config.single_member_merge,
                run_logger=self._run_logger,
            )
            return await merger.merge(segments, paths.output_path)
        except (RetryExhaustedError, TransientProviderError) as exc:
            raise PipelineStageError(
                stage="concat",
                detail=str(exc),
                hint="Verify storage access, then rerun; segments are not resynthesized.",
            ) from exc
        except InvalidInputError as exc:
            raise PipelineStageError(
                stage="concat",
                detail=str(exc),
                hint=f"Check segment names under `{paths.audio_prefix}` and `--max-combine`.",
            ) from exc
        except Exception as exc:
            raise PipelineStageError(
                stage="concat",
                detail=f"Failed to merge audio segments: {exc}",
                hint="Check storage permissions for the output prefix.",
            ) from exc

    def _resolve_storage(self, config: PdfAudifyConfig) -> StorageGateway:
        """Return the injected storage gateway or build one from configuration."""

        if self._storage is not None:
            return self._storage
        try:
            return ProviderFactory.create_storage(config)
        except Exception as exc:
            raise PipelineStageError(
                stage="storage",
                detail=f"Failed to initialize storage: {exc}",
                hint="Check `--bucket` or `--local-root` and Google Cloud credentials.",
            ) from exc

    def _validate_config(self, config: PdfAudifyConfig) -> None:
        """Validate top-level configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update the config file, environment, or CLI options and rerun.",
            ) from exc

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        """Return 1-based stage index and total stage count for known stages."""

        try:
            index = self._PHASE_SEQUENCE.index(stage_name) + 1
        except ValueError:
            return None
        return index, len(self._PHASE_SEQUENCE)

    def _on_stage_start(self, stage_name: str) -> None:
        """Emit start events to stage progress callback and structured logger."""

        stage_position = self._stage_position(stage_name)
        if stage_position and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, stage_position[0], stage_position[1])
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)

    def _on_stage_complete(self, stage_name: str) -> None:
        """Emit stage-complete event to the structured logger."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)

    def _on_stage_failure(self, stage_name: str, exc: Exception) -> None:
        """Emit stage-failure event with sanitized exception metadata."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage_name, type(exc).__name__)

    async def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], Awaitable[_StageResult]],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        self._on_stage_start(stage_name)
        try:
            result = await action()
        except Exception as exc:
            self._on_stage_failure(stage_name, exc)
            raise
        self._on_stage_complete(stage_name)
        return result
