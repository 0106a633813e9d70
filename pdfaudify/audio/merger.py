"""Audio concatenation stage.

Responsibilities:
- Reduce any number of MP3 segments to one object despite the storage combine limit.
- Derive deterministic intermediate names from the sequence range each group covers.
- Run each reduction level as one bounded batch; levels run strictly one after another.
"""

from __future__ import annotations

from functools import partial
import posixpath
from typing import Sequence

from ..errors import InvalidInputError
from ..io.storage import StorageGateway
from ..parsing import segment_range
from ..pipeline.task_runner import BoundedTaskRunner, TaskJob
from ..telemetry.logger import RunLogger

AUDIO_CONTENT_TYPE = "audio/mpeg"
SINGLE_MEMBER_POLICIES = ("combine", "copy")


def merged_segment_path(group: Sequence[str]) -> str:
    """Return the intermediate path for a group, placed beside its first member."""

    start, _ = segment_range(group[0])
    _, end = segment_range(group[-1])
    return posixpath.join(
        posixpath.dirname(group[0]), f"concat-{start:03d}-{end:03d}.mp3"
    )


class AudioMerger:
    """Concatenate ordered audio segments into one output object."""

    def __init__(
        self,
        storage: StorageGateway,
        runner: BoundedTaskRunner,
        max_combine: int = 32,
        single_member_policy: str = "combine",
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the merger with its storage, runner, and grouping policy."""

        if max_combine < 2:
            raise InvalidInputError("`max_combine` must be at least 2.")
        if max_combine > storage.combine_limit:
            raise InvalidInputError(
                f"`max_combine` must not exceed the storage combine limit "
                f"({storage.combine_limit})."
            )
        if single_member_policy not in SINGLE_MEMBER_POLICIES:
            raise InvalidInputError(
                "`single_member_policy` must be one of: combine, copy."
            )
        self._storage = storage
        self._runner = runner
        self.max_combine = max_combine
        self.single_member_policy = single_member_policy
        self._run_logger = run_logger

    async def merge(self, segments: Sequence[str], output_path: str) -> str:
        """Merge `segments` into `output_path` and return the output path.

        A single segment is copied to the output. Otherwise segments are grouped
        into runs of at most `max_combine`, each group is combined into an
        intermediate object, and the intermediates are merged the same way.

        Raises:
            InvalidInputError: If `segments` is empty or a name carries no sequence index.
        """

        if not segments:
            raise InvalidInputError("Audio merge requires at least one segment.")
        if len(segments) == 1:
            (only,) = segments
            await self._runner.call(
                f"copy:{output_path}", partial(self._storage.copy, only, output_path)
            )
            return output_path

        ordered = sorted(segments, key=segment_range)
        groups = [
            ordered[index : index + self.max_combine]
            for index in range(0, len(ordered), self.max_combine)
        ]
        jobs = [
            TaskJob(key=merged_segment_path(group), work=self._group_work(group))
            for group in groups
        ]
        merged = await self._runner.run(jobs)
        if self._run_logger is not None:
            self._run_logger.log_event(
                "concat", "merge_level", inputs=len(ordered), outputs=len(merged)
            )
        return await self.merge(merged, output_path)

    def _group_work(self, group: list[str]):
        """Return the coroutine factory that materializes one group."""

        destination = merged_segment_path(group)
        if len(group) == 1 and group[0] == destination:
            return partial(self._pass_through, destination)
        if len(group) == 1 and self.single_member_policy == "copy":
            return partial(self._copy_member, group[0], destination)
        return partial(self._combine_group, group, destination)

    async def _combine_group(self, group: list[str], destination: str) -> str:
        await self._storage.combine(group, destination, content_type=AUDIO_CONTENT_TYPE)
        return destination

    async def _copy_member(self, member: str, destination: str) -> str:
        await self._storage.copy(member, destination)
        return destination

    @staticmethod
    async def _pass_through(destination: str) -> str:
        return destination
