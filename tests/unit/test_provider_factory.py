"""Tests for provider factories."""

from pathlib import Path

import pytest

from pdfaudify.config import PdfAudifyConfig
from pdfaudify.io.storage import LocalArtifactStore
from pdfaudify.ocr.vision import GoogleVisionOcrProvider
from pdfaudify.provider_factory import ProviderFactory
from pdfaudify.tts.synthesizer import GoogleSpeechProvider


def test_local_root_selects_filesystem_storage(tmp_path: Path) -> None:
    """A local root should build a filesystem store using the configured limits."""

    config = PdfAudifyConfig(source_path="a.pdf", local_root=tmp_path, max_combine=64, list_limit=10)

    store = ProviderFactory.create_storage(config)

    assert isinstance(store, LocalArtifactStore)
    assert store.root == tmp_path
    assert store.combine_limit == 64
    assert store.list_limit == 10


def test_bucket_selects_gcs_storage(monkeypatch: pytest.MonkeyPatch) -> None:
    """A bucket should build the GCS gateway without touching real credentials."""

    created: list[tuple[str, int]] = []

    class _Gateway:
        def __init__(self, bucket_name: str, *, list_limit: int) -> None:
            created.append((bucket_name, list_limit))

    monkeypatch.setattr("pdfaudify.provider_factory.GcsStorageGateway", _Gateway)

    store = ProviderFactory.create_storage(PdfAudifyConfig(source_path="a.pdf", bucket="books"))

    assert isinstance(store, _Gateway)
    assert created == [("books", 1000)]


def test_unconfigured_storage_is_rejected() -> None:
    """Storage cannot be created without a bucket or local root."""

    with pytest.raises(ValueError, match="bucket"):
        ProviderFactory.create_storage(PdfAudifyConfig(source_path="a.pdf"))


def test_google_providers_are_created_lazily() -> None:
    """OCR and speech providers should not need credentials until first use."""

    config = PdfAudifyConfig(
        source_path="a.pdf", bucket="books", ocr_batch_size=4, ocr_timeout_seconds=30
    )

    ocr = ProviderFactory.create_ocr_provider(config)
    speech = ProviderFactory.create_speech_provider(config)

    assert isinstance(ocr, GoogleVisionOcrProvider)
    assert (ocr.batch_size, ocr.timeout_seconds) == (4, 30)
    assert isinstance(speech, GoogleSpeechProvider)
