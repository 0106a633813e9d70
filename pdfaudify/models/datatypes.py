"""Core datatypes shared across pdfaudify modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Derive deterministic storage paths for one source document.

Key types:
- `Chunk`, `PipelinePaths`, and `PipelineResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import posixpath

from ..errors import InvalidInputError


@dataclass(frozen=True, slots=True)
class Chunk:
    """A run of consecutive sentence fragments sent to one synthesis request.

    Attributes:
        number: 1-based chunk number; also the output file sequence index.
        text: Concatenated fragment text.
        fragment_start: Inclusive index of the first fragment in the chunk.
        fragment_end: Exclusive index after the last fragment in the chunk.
    """

    number: int
    text: str
    fragment_start: int
    fragment_end: int

    @property
    def fragment_count(self) -> int:
        """Return how many fragments the chunk holds."""

        return self.fragment_end - self.fragment_start


@dataclass(frozen=True, slots=True)
class PipelinePaths:
    """Storage locations derived from one source PDF object.

    Attributes:
        source_path: Storage path of the source PDF.
        ocr_prefix: Prefix receiving OCR JSON shards.
        audio_prefix: Prefix receiving per-chunk MP3 segments.
        output_path: Final merged MP3 object path.
    """

    source_path: str
    ocr_prefix: str
    audio_prefix: str
    output_path: str

    @classmethod
    def from_source(cls, source_path: str, path_prefix: str = "dev") -> PipelinePaths:
        """Derive stage prefixes from the PDF base name under a fixed root prefix."""

        if not source_path.lower().endswith(".pdf"):
            raise InvalidInputError(f"Source object is not a PDF: `{source_path}`.")
        basename = posixpath.basename(source_path)[: -len(".pdf")]
        if not basename:
            raise InvalidInputError(f"Source object has an empty base name: `{source_path}`.")
        root = path_prefix.strip("/")
        parts = [root] if root else []
        return cls(
            source_path=source_path,
            ocr_prefix="/".join([*parts, "json", basename]),
            audio_prefix="/".join([*parts, "mp3", basename]),
            output_path="/".join([*parts, "out", f"{basename}.mp3"]),
        )


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Record of one completed pipeline run.

    Attributes:
        paths: Derived storage locations for the run.
        ocr_shards: OCR JSON shard paths in shard order.
        audio_segments: Per-chunk MP3 segment paths in sequence order.
        output_path: Final merged MP3 path.
    """

    paths: PipelinePaths
    ocr_shards: tuple[str, ...] = field(default_factory=tuple)
    audio_segments: tuple[str, ...] = field(default_factory=tuple)
    output_path: str = ""
