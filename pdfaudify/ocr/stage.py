"""Idempotent OCR stage.

Responsibilities:
- Skip OCR when the destination prefix already holds output shards.
- Otherwise run the OCR provider once, under the runner's retry policy.
- Return shard paths ordered by the shard number in their names.
"""

from __future__ import annotations

from ..errors import InvalidInputError
from ..io.storage import StorageGateway
from ..parsing import directory_prefix, shard_number
from ..pipeline.task_runner import BoundedTaskRunner
from ..telemetry.logger import RunLogger
from .vision import OcrProvider


def sort_shards(names: list[str]) -> list[str]:
    """Order OCR shard names by shard number, then by name."""

    return sorted(names, key=lambda name: (shard_number(name), name))


class OcrStage:
    """Produce OCR JSON shards for one source document."""

    def __init__(
        self,
        storage: StorageGateway,
        provider: OcrProvider,
        runner: BoundedTaskRunner,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize stage collaborators."""

        self._storage = storage
        self._provider = provider
        self._runner = runner
        self._run_logger = run_logger

    async def run(self, source_path: str, output_prefix: str) -> list[str]:
        """Return OCR shard paths for `source_path`, running OCR only when missing."""

        existing = await self._list(output_prefix)
        if existing:
            if self._run_logger is not None:
                self._run_logger.log_event(
                    "ocr", "ocr_skip", prefix=output_prefix, shards=len(existing)
                )
            return sort_shards(existing)

        source_uri = self._storage.uri_for(source_path)
        destination_uri = directory_prefix(self._storage.uri_for(output_prefix))
        await self._runner.call(
            f"ocr:{output_prefix}",
            lambda: self._provider.extract_text(source_uri, destination_uri),
        )
        shards = await self._list(output_prefix)
        if not shards:
            raise InvalidInputError(
                f"OCR produced no output shards under `{output_prefix}` for `{source_path}`."
            )
        if self._run_logger is not None:
            self._run_logger.log_event("ocr", "ocr_done", prefix=output_prefix, shards=len(shards))
        return sort_shards(shards)

    async def _list(self, prefix: str) -> list[str]:
        """List shards directly under `prefix` with the runner's retry policy."""

        listing_prefix = directory_prefix(prefix)
        return await self._runner.call(
            f"list:{listing_prefix}", lambda: self._storage.list_files(listing_prefix)
        )
