"""Text reconstruction and chunking components.

This package rebuilds sentence fragments from OCR geometry and packs them into
bounded chunks for the speech stage.
"""

from .chunking import ChunkPlanner, chunk_output_path
from .segmenter import SentenceSegmenter

__all__ = ["ChunkPlanner", "SentenceSegmenter", "chunk_output_path"]
