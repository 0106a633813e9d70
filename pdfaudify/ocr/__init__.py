"""OCR components for pdfaudify.

This package parses OCR output shards into typed documents and runs the
idempotent OCR stage against a provider.
"""

from .parser import load_ocr_document, parse_ocr_document
from .stage import OcrStage, sort_shards
from .vision import GoogleVisionOcrProvider, OcrProvider

__all__ = [
    "GoogleVisionOcrProvider",
    "OcrProvider",
    "OcrStage",
    "load_ocr_document",
    "parse_ocr_document",
    "sort_shards",
]
