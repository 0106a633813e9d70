"""Provider factory helpers for storage, OCR, and speech stages.

Responsibilities:
- Resolve configuration to concrete gateway and provider implementations.
- Keep orchestration independent from concrete client construction.
"""

from __future__ import annotations

from .config import PdfAudifyConfig
from .io.gcs_storage import GcsStorageGateway
from .io.storage import LocalArtifactStore, StorageGateway
from .ocr.vision import GoogleVisionOcrProvider, OcrProvider
from .tts.synthesizer import GoogleSpeechProvider, SpeechProvider


class ProviderFactory:
    """Factory for provider-backed clients used by the pipeline."""

    @staticmethod
    def create_storage(config: PdfAudifyConfig) -> StorageGateway:
        """Create the storage gateway selected by `bucket` or `local_root`."""

        if config.bucket is not None:
            return GcsStorageGateway(config.bucket, list_limit=config.list_limit)
        if config.local_root is not None:
            return LocalArtifactStore(
                config.local_root,
                list_limit=config.list_limit,
                combine_limit=config.max_combine,
            )
        raise ValueError("Either `bucket` or `local_root` must be configured.")

    @staticmethod
    def create_ocr_provider(config: PdfAudifyConfig) -> OcrProvider:
        """Create the Cloud Vision OCR provider."""

        return GoogleVisionOcrProvider(
            batch_size=config.ocr_batch_size,
            timeout_seconds=config.ocr_timeout_seconds,
        )

    @staticmethod
    def create_speech_provider(config: PdfAudifyConfig) -> SpeechProvider:
        """Create the Cloud Text-to-Speech provider."""

        _ = config
        return GoogleSpeechProvider()
