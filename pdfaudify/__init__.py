"""Top-level package for pdfaudify.

This package converts scanned PDF documents stored in object storage into one
narrated MP3 file: OCR, sentence reconstruction, chunked speech synthesis, and
bounded-arity concatenation. The main orchestration entry point is
`PdfAudifyPipeline`; `pdfaudify` on the command line and
`handle_storage_event` for object-finalize notifications both drive it.
"""

from .pipeline.orchestrator import PdfAudifyPipeline
from .trigger import handle_storage_event

__all__ = ["PdfAudifyPipeline", "handle_storage_event", "__version__"]

__version__ = "0.1.0"
