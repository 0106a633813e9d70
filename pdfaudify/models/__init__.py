"""Shared typed data models for pdfaudify.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import Chunk, PipelinePaths, PipelineResult
from .ocr import (
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
    WordBox,
)

__all__ = [
    "AnnotateResponse",
    "Block",
    "BoundingBox",
    "Chunk",
    "OcrDocument",
    "OcrPage",
    "Paragraph",
    "PipelinePaths",
    "PipelineResult",
    "Symbol",
    "TextAnnotation",
    "Vertex",
    "Word",
    "WordBox",
]
