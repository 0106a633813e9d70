"""OCR output JSON parsing.

Responsibilities:
- Convert one OCR output shard JSON payload into the typed `OcrDocument` tree.
- Reject malformed nesting with `InvalidInputError` instead of failing deep inside
  segmentation.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import InvalidInputError
from ..models.ocr import (
    AnnotateResponse,
    Block,
    BoundingBox,
    OcrDocument,
    OcrPage,
    Paragraph,
    Symbol,
    TextAnnotation,
    Vertex,
    Word,
)


def load_ocr_document(raw_text: str, source: str = "<memory>") -> OcrDocument:
    """Parse OCR JSON text into a typed document."""

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"OCR output `{source}` is not valid JSON.") from exc
    return parse_ocr_document(payload, source)


def parse_ocr_document(payload: Any, source: str = "<memory>") -> OcrDocument:
    """Build a typed document from a decoded OCR JSON payload.

    Args:
        payload: Decoded JSON root object.
        source: Label used in error messages.

    Raises:
        InvalidInputError: If the payload is missing required nesting.
    """

    root = _require_mapping(payload, "root", source)
    responses = tuple(
        _parse_response(item, f"responses[{index}]", source)
        for index, item in enumerate(_require_list(root, "responses", "root", source))
    )
    return OcrDocument(responses=responses)


def _parse_response(payload: Any, where: str, source: str) -> AnnotateResponse:
    """Parse one response; a missing annotation means the page batch had no text."""

    response = _require_mapping(payload, where, source)
    annotation_payload = response.get("fullTextAnnotation")
    if annotation_payload is None:
        return AnnotateResponse()
    annotation_where = f"{where}.fullTextAnnotation"
    annotation = _require_mapping(annotation_payload, annotation_where, source)
    pages = tuple(
        _parse_page(item, f"{annotation_where}.pages[{index}]", source)
        for index, item in enumerate(
            _require_list(annotation, "pages", annotation_where, source)
        )
    )
    return AnnotateResponse(full_text_annotation=TextAnnotation(pages=pages))


def _parse_page(payload: Any, where: str, source: str) -> OcrPage:
    page = _require_mapping(payload, where, source)
    blocks = []
    for block_index, block_payload in enumerate(
        _optional_list(page, "blocks", where, source)
    ):
        block_where = f"{where}.blocks[{block_index}]"
        block = _require_mapping(block_payload, block_where, source)
        paragraphs = []
        for paragraph_index, paragraph_payload in enumerate(
            _optional_list(block, "paragraphs", block_where, source)
        ):
            paragraph_where = f"{block_where}.paragraphs[{paragraph_index}]"
            paragraph = _require_mapping(paragraph_payload, paragraph_where, source)
            words = tuple(
                _parse_word(item, f"{paragraph_where}.words[{word_index}]", source)
                for word_index, item in enumerate(
                    _optional_list(paragraph, "words", paragraph_where, source)
                )
            )
            paragraphs.append(Paragraph(words=words))
        blocks.append(Block(paragraphs=tuple(paragraphs)))
    return OcrPage(blocks=tuple(blocks))


def _parse_word(payload: Any, where: str, source: str) -> Word:
    word = _require_mapping(payload, where, source)
    box = _require_mapping(word.get("boundingBox"), f"{where}.boundingBox", source)
    vertices = tuple(
        _parse_vertex(item, f"{where}.boundingBox.normalizedVertices[{index}]", source)
        for index, item in enumerate(
            _require_list(box, "normalizedVertices", f"{where}.boundingBox", source)
        )
    )
    symbols = []
    for index, item in enumerate(_require_list(word, "symbols", where, source)):
        symbol = _require_mapping(item, f"{where}.symbols[{index}]", source)
        text = symbol.get("text", "")
        if not isinstance(text, str):
            raise InvalidInputError(
                f"OCR output `{source}` has non-string `{where}.symbols[{index}].text`."
            )
        symbols.append(Symbol(text=text))
    return Word(
        bounding_box=BoundingBox(normalized_vertices=vertices),
        symbols=tuple(symbols),
    )


def _parse_vertex(payload: Any, where: str, source: str) -> Vertex:
    """Parse a vertex; the OCR provider omits coordinates equal to zero."""

    vertex = _require_mapping(payload, where, source)
    coordinates = []
    for axis in ("x", "y"):
        value = vertex.get(axis, 0.0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(
                f"OCR output `{source}` has non-numeric `{where}.{axis}`."
            )
        coordinates.append(float(value))
    return Vertex(x=coordinates[0], y=coordinates[1])


def _require_mapping(value: Any, where: str, source: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidInputError(f"OCR output `{source}` is missing object `{where}`.")
    return value


def _require_list(
    mapping: dict[str, Any], key: str, where: str, source: str
) -> list[Any]:
    value = mapping.get(key)
    if not isinstance(value, list):
        raise InvalidInputError(f"OCR output `{source}` is missing list `{where}.{key}`.")
    return value


def _optional_list(
    mapping: dict[str, Any], key: str, where: str, source: str
) -> list[Any]:
    """Return a list field that the provider omits when it would be empty."""

    if key not in mapping:
        return []
    return _require_list(mapping, key, where, source)
