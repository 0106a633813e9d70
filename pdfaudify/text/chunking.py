"""Length-bounded grouping of sentence fragments into synthesis chunks.

Responsibilities:
- Greedily pack consecutive fragments into chunks of at most `max_length` characters.
- Never split a fragment; an oversized fragment becomes a chunk on its own.
- Name per-chunk audio outputs deterministically from the chunk number.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Sequence

from ..models.datatypes import Chunk
from ..parsing import directory_prefix


def chunk_output_path(prefix: str, number: int) -> str:
    """Return the audio object path for a 1-based chunk number.

    Numbers are zero-padded to three digits; larger numbers keep all their digits.
    """

    return f"{directory_prefix(prefix)}output-{number:03d}.mp3"


def chunk_listing_prefix(prefix: str) -> str:
    """Return the listing prefix that matches per-chunk outputs and nothing else."""

    return f"{directory_prefix(prefix)}output-"


class ChunkPlanner:
    """Plan synthesis chunks from an ordered fragment sequence."""

    def __init__(self, max_length: int = 5000) -> None:
        """Initialize the per-chunk character budget."""

        if max_length <= 0:
            raise ValueError("`max_length` must be a positive integer.")
        self.max_length = max_length

    def next_chunk(self, fragments: Sequence[str], start_index: int) -> tuple[str, int]:
        """Collect the chunk starting at `start_index`.

        Returns:
            The chunk text and the index of the first fragment not included. The
            text is empty only when `start_index` is already past the end.
        """

        text = ""
        for index in range(start_index, len(fragments)):
            fragment = fragments[index]
            if text and len(text) + len(fragment) > self.max_length:
                return text, index
            text += fragment
        return text, len(fragments)

    def plan(self, fragments: Sequence[str]) -> Iterator[Chunk]:
        """Yield chunks lazily, numbered from 1, covering every fragment in order."""

        number = 0
        index = 0
        while index < len(fragments):
            text, next_index = self.next_chunk(fragments, index)
            number += 1
            yield Chunk(
                number=number,
                text=text,
                fragment_start=index,
                fragment_end=next_index,
            )
            index = next_index

    def chunk(self, fragments: Sequence[str]) -> list[Chunk]:
        """Return every planned chunk as a list."""

        return list(self.plan(fragments))
