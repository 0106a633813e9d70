"""Typed OCR result tree.

Responsibilities:
- Represent one OCR output shard as Document -> Page -> Block -> Paragraph -> Word ->
  Symbol entities instead of untyped nested dictionaries.
- Make the optional `full_text_annotation` explicit per response.

Key types:
- `OcrDocument`: one parsed OCR output shard.
- `WordBox`: word text with its bounding polygon, scoped to one page.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Vertex:
    """One normalized polygon vertex, coordinates in `[0, 1]`."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Polygon around a word, expressed as normalized vertices."""

    normalized_vertices: tuple[Vertex, ...] = field(default_factory=tuple)

    @property
    def ys(self) -> tuple[float, ...]:
        """Return the y coordinate of every vertex in polygon order."""

        return tuple(vertex.y for vertex in self.normalized_vertices)


@dataclass(frozen=True, slots=True)
class Symbol:
    """A single recognized character."""

    text: str


@dataclass(frozen=True, slots=True)
class Word:
    """A recognized word made of symbols."""

    bounding_box: BoundingBox
    symbols: tuple[Symbol, ...]

    @property
    def text(self) -> str:
        """Return the word text by joining its symbols."""

        return "".join(symbol.text for symbol in self.symbols)


@dataclass(frozen=True, slots=True)
class Paragraph:
    words: tuple[Word, ...]


@dataclass(frozen=True, slots=True)
class Block:
    paragraphs: tuple[Paragraph, ...]


@dataclass(frozen=True, slots=True)
class OcrPage:
    """One OCR page with blocks in provider emission order."""

    blocks: tuple[Block, ...]

    def word_boxes(self) -> list[WordBox]:
        """Flatten blocks and paragraphs into word boxes in emission order."""

        return [
            WordBox(text=word.text, bounding_box=word.bounding_box)
            for block in self.blocks
            for paragraph in block.paragraphs
            for word in paragraph.words
        ]


@dataclass(frozen=True, slots=True)
class TextAnnotation:
    pages: tuple[OcrPage, ...]


@dataclass(frozen=True, slots=True)
class AnnotateResponse:
    """One per-page-batch response; pages without text carry no annotation."""

    full_text_annotation: TextAnnotation | None = None


@dataclass(frozen=True, slots=True)
class OcrDocument:
    """One parsed OCR output shard."""

    responses: tuple[AnnotateResponse, ...]

    def pages(self) -> list[OcrPage]:
        """Return all annotated pages across responses, skipping empty responses."""

        return [
            page
            for response in self.responses
            if response.full_text_annotation is not None
            for page in response.full_text_annotation.pages
        ]


@dataclass(frozen=True, slots=True)
class WordBox:
    """Word text plus its bounding polygon, scoped to one page.

    Attributes:
        text: Word text joined from its symbols.
        bounding_box: Normalized polygon around the word.
    """

    text: str
    bounding_box: BoundingBox

    @property
    def min_y(self) -> float:
        """Return the top edge of the word box."""

        return min(self.bounding_box.ys, default=0.0)

    @property
    def max_y(self) -> float:
        """Return the bottom edge of the word box."""

        return max(self.bounding_box.ys, default=0.0)
