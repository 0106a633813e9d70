"""OCR provider interface and Google Cloud Vision implementation.

Responsibilities:
- Define the OCR provider protocol consumed by the OCR stage.
- Run asynchronous PDF document-text detection that writes JSON shards to storage.
- Map client failures to `TransientProviderError` for the retry wrapper.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Protocol

from google.api_core import exceptions as google_exceptions
from google.cloud import vision

from ..errors import InvalidInputError, TransientProviderError


class OcrProvider(Protocol):
    """Protocol for OCR providers that write result shards under a destination URI."""

    async def extract_text(self, source_uri: str, destination_uri: str) -> str:
        """Run OCR on a document and return the destination URI holding the shards."""


class GoogleVisionOcrProvider:
    """Cloud Vision `DOCUMENT_TEXT_DETECTION` over PDFs stored in GCS."""

    def __init__(
        self,
        *,
        client: vision.ImageAnnotatorClient | None = None,
        batch_size: int = 2,
        timeout_seconds: float = 600.0,
    ) -> None:
        """Initialize long-running operation settings.

        The annotator client is created on first use so runs that skip OCR never
        need Vision credentials.
        """

        self._client = client
        self.batch_size = batch_size
        self.timeout_seconds = timeout_seconds

    def _annotator(self) -> vision.ImageAnnotatorClient:
        """Return the annotator client, creating it with ambient credentials if needed."""

        if self._client is None:
            self._client = vision.ImageAnnotatorClient()
        return self._client

    async def extract_text(self, source_uri: str, destination_uri: str) -> str:
        """Start asynchronous file annotation and wait for it without blocking the loop."""

        for uri in (source_uri, destination_uri):
            if not uri.startswith("gs://"):
                raise InvalidInputError(
                    f"Cloud Vision file OCR requires `gs://` URIs, got `{uri}`."
                )

        request = vision.AsyncAnnotateFileRequest(
            features=[vision.Feature(type_=vision.Feature.Type.DOCUMENT_TEXT_DETECTION)],
            input_config=vision.InputConfig(
                gcs_source=vision.GcsSource(uri=source_uri),
                mime_type="application/pdf",
            ),
            output_config=vision.OutputConfig(
                gcs_destination=vision.GcsDestination(uri=destination_uri),
                batch_size=self.batch_size,
            ),
        )

        def _annotate() -> str:
            operation = self._annotator().async_batch_annotate_files(requests=[request])
            response = operation.result(timeout=self.timeout_seconds)
            return response.responses[0].output_config.gcs_destination.uri

        try:
            return await asyncio.to_thread(_annotate)
        except (google_exceptions.GoogleAPIError, concurrent.futures.TimeoutError) as exc:
            raise TransientProviderError(
                f"Cloud Vision OCR failed for `{source_uri}`: {exc}",
                provider="vision",
                operation="ocr",
            ) from exc
