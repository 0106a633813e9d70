"""Speech synthesis stage.

Responsibilities:
- Read OCR shards and rebuild sentence fragments in shard order.
- Plan bounded chunks and synthesize one audio object per chunk.
- Resume partially completed runs by skipping outputs that already exist.
"""

from __future__ import annotations

from functools import partial
from typing import Sequence

from ..io.storage import StorageGateway
from ..ocr.parser import load_ocr_document
from ..pipeline.task_runner import BoundedTaskRunner, TaskJob
from ..telemetry.logger import RunLogger
from ..text.chunking import ChunkPlanner, chunk_listing_prefix, chunk_output_path
from ..text.segmenter import SentenceSegmenter
from .synthesizer import SpeechProvider
from .voices import VoiceSettings

AUDIO_CONTENT_TYPE = "audio/mpeg"


class SpeechSynthesisStage:
    """Turn OCR shards into numbered MP3 segments."""

    def __init__(
        self,
        storage: StorageGateway,
        provider: SpeechProvider,
        runner: BoundedTaskRunner,
        *,
        segmenter: SentenceSegmenter | None = None,
        planner: ChunkPlanner | None = None,
        voice: VoiceSettings | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize stage collaborators and synthesis settings."""

        self._storage = storage
        self._provider = provider
        self._runner = runner
        self.segmenter = segmenter or SentenceSegmenter()
        self.planner = planner or ChunkPlanner()
        self.voice = voice or VoiceSettings()
        self._run_logger = run_logger

    async def run(self, ocr_paths: Sequence[str], output_prefix: str) -> list[str]:
        """Synthesize every planned chunk and return segment paths in sequence order."""

        listing_prefix = chunk_listing_prefix(output_prefix)
        existing = await self._runner.call(
            f"list:{listing_prefix}", lambda: self._storage.list_files(listing_prefix)
        )
        fragments = await self.read_fragments(ocr_paths)
        jobs = []
        for chunk in self.planner.plan(fragments):
            output_path = chunk_output_path(output_prefix, chunk.number)
            jobs.append(
                TaskJob(key=output_path, work=partial(self._synthesize_to, chunk.text, output_path))
            )
        if self._run_logger is not None:
            self._run_logger.log_event(
                "tts",
                "plan",
                fragments=len(fragments),
                chunks=len(jobs),
                existing=len(existing),
            )
        return await self._runner.run(jobs, existing_keys=existing)

    async def read_fragments(self, ocr_paths: Sequence[str]) -> list[str]:
        """Read and segment OCR shards, concatenating fragments in shard order."""

        raw_documents = await self._runner.run(
            [TaskJob(key=path, work=partial(self._storage.read_text, path)) for path in ocr_paths]
        )
        fragments: list[str] = []
        for path, raw_text in zip(ocr_paths, raw_documents):
            fragments.extend(self.segmenter.segment(load_ocr_document(raw_text, path)))
        return fragments

    async def _synthesize_to(self, text: str, output_path: str) -> str:
        """Synthesize one chunk and publish it through a scoped write handle."""

        audio = await self._provider.synthesize(text, self.voice)
        async with self._storage.open_write(output_path, AUDIO_CONTENT_TYPE) as handle:
            await handle.write(audio)
        if self._run_logger is not None:
            self._run_logger.log_debug("tts", "segment_written", path=output_path, chars=len(text))
        return output_path
