"""Geometry-based sentence reconstruction from OCR word boxes.

Responsibilities:
- Turn pages of word boxes into delimiter-terminated sentence fragments.
- Detect sentence breaks from vertical layout instead of language grammar.

The boundary rule compares each word with the next word on the same page. A word
ends a sentence when its whole box lies above the last-line band of the page
(`0.9 * ymax`) and the next word's top edge is above the current word's bottom
edge, i.e. the two boxes overlap vertically. A word followed by a line wrap never
ends a sentence, and neither does the last word of a page.
"""

from __future__ import annotations

from typing import Iterable

from ..models.ocr import OcrDocument, WordBox

_LAST_LINE_BAND_RATIO = 0.9


class SentenceSegmenter:
    """Reconstruct sentence fragments from OCR word boxes."""

    def __init__(self, delimiter: str = "。") -> None:
        """Initialize the sentence delimiter appended to every fragment."""

        if not delimiter:
            raise ValueError("Sentence delimiter must not be empty.")
        self.delimiter = delimiter

    def segment(self, document: OcrDocument) -> list[str]:
        """Return ordered sentence fragments for every page of one OCR document."""

        return self.segment_pages(page.word_boxes() for page in document.pages())

    def segment_pages(self, pages: Iterable[list[WordBox]]) -> list[str]:
        """Return ordered sentence fragments for pages of word boxes.

        Args:
            pages: Word boxes per page in provider emission order.

        Returns:
            Non-empty fragments, each ending with the delimiter.
        """

        stream = "".join(self._page_text(words) for words in pages)
        return [
            piece if piece.endswith(self.delimiter) else piece + self.delimiter
            for piece in stream.split(self.delimiter)
            if piece
        ]

    def _page_text(self, words: list[WordBox]) -> str:
        """Concatenate page words, inserting the delimiter at detected boundaries."""

        if not words:
            return ""
        ymax = max(word.max_y for word in words)
        threshold = ymax * _LAST_LINE_BAND_RATIO
        parts: list[str] = []
        for current, following in zip(words, words[1:]):
            parts.append(current.text)
            if self._is_boundary(current, following, threshold):
                parts.append(self.delimiter)
        parts.append(words[-1].text)
        return "".join(parts)

    @staticmethod
    def _is_boundary(current: WordBox, following: WordBox, threshold: float) -> bool:
        """Return whether a sentence ends between two consecutive words."""

        above_last_line = all(y < threshold for y in current.bounding_box.ys)
        return above_last_line and following.min_y < current.max_y
