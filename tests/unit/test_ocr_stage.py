"""Unit tests for the idempotent OCR stage."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pdfaudify.errors import InvalidInputError, RetryExhaustedError, TransientProviderError
from pdfaudify.io.storage import LocalArtifactStore
from pdfaudify.ocr.stage import OcrStage, sort_shards
from pdfaudify.pipeline.task_runner import BoundedTaskRunner

from tests.fakes import FakeOcrProvider, InMemoryStorage, ocr_json

_PREFIX = "dev/json/book"


def test_sort_shards_orders_by_first_number_in_base_name() -> None:
    """Shard names should sort numerically rather than lexically."""

    names = [
        f"{_PREFIX}/output-11-to-12.json",
        f"{_PREFIX}/output-1-to-2.json",
        f"{_PREFIX}/output-3-to-4.json",
    ]

    assert sort_shards(names) == [
        f"{_PREFIX}/output-1-to-2.json",
        f"{_PREFIX}/output-3-to-4.json",
        f"{_PREFIX}/output-11-to-12.json",
    ]


def test_existing_shards_skip_the_provider() -> None:
    """A populated prefix should be reused as-is."""

    storage = InMemoryStorage(
        {
            f"{_PREFIX}/output-3-to-4.json": b"{}",
            f"{_PREFIX}/output-1-to-2.json": b"{}",
        }
    )
    provider = FakeOcrProvider(storage, {})

    shards = asyncio.run(
        OcrStage(storage, provider, BoundedTaskRunner()).run("in/book.pdf", _PREFIX)
    )

    assert provider.calls == []
    assert shards == [f"{_PREFIX}/output-1-to-2.json", f"{_PREFIX}/output-3-to-4.json"]


def test_missing_shards_run_the_provider_once() -> None:
    """An empty prefix should trigger OCR with storage URIs and list the new shards."""

    storage = InMemoryStorage({"in/book.pdf": b"%PDF"})
    provider = FakeOcrProvider(
        storage,
        {
            "output-10-to-11.json": ocr_json([]),
            "output-2-to-3.json": ocr_json([]),
        },
    )

    shards = asyncio.run(
        OcrStage(storage, provider, BoundedTaskRunner()).run("in/book.pdf", _PREFIX)
    )

    assert provider.calls == [("mem://in/book.pdf", f"mem://{_PREFIX}/")]
    assert shards == [f"{_PREFIX}/output-2-to-3.json", f"{_PREFIX}/output-10-to-11.json"]


def test_provider_writing_nothing_is_invalid_input() -> None:
    """OCR that yields no shards should fail instead of producing silence."""

    storage = InMemoryStorage()
    provider = FakeOcrProvider(storage, {})

    with pytest.raises(InvalidInputError, match="no output shards"):
        asyncio.run(OcrStage(storage, provider, BoundedTaskRunner()).run("in/book.pdf", _PREFIX))


def test_transient_provider_failures_are_retried_then_exhausted() -> None:
    """Provider outages should be retried up to the attempt budget."""

    class _DownProvider:
        def __init__(self) -> None:
            self.calls = 0

        async def extract_text(self, source_uri: str, destination_uri: str) -> str:
            self.calls += 1
            raise TransientProviderError("vision down", provider="vision")

    provider = _DownProvider()

    with pytest.raises(RetryExhaustedError):
        asyncio.run(
            OcrStage(InMemoryStorage(), provider, BoundedTaskRunner(max_attempts=3)).run(
                "in/book.pdf", _PREFIX
            )
        )

    assert provider.calls == 3


def test_sibling_document_shards_are_not_reused(tmp_path: Path) -> None:
    """Shards of `chapter10` must not count as OCR output for `chapter1`."""

    sibling = tmp_path / "dev" / "json" / "chapter10"
    sibling.mkdir(parents=True)
    (sibling / "output-1-to-2.json").write_text(ocr_json([]), encoding="utf-8")
    (tmp_path / "dev" / "json" / "chapter1-vol2").mkdir()
    (tmp_path / "dev" / "json" / "chapter1-vol2" / "output-1-to-1.json").write_text(
        ocr_json([]), encoding="utf-8"
    )
    store = LocalArtifactStore(tmp_path)
    own = tmp_path / "dev" / "json" / "chapter1"
    calls: list[tuple[str, str]] = []

    class _WritingProvider:
        async def extract_text(self, source_uri: str, destination_uri: str) -> str:
            calls.append((source_uri, destination_uri))
            own.mkdir(parents=True)
            (own / "output-1-to-2.json").write_text(ocr_json([]), encoding="utf-8")
            return destination_uri

    shards = asyncio.run(
        OcrStage(store, _WritingProvider(), BoundedTaskRunner()).run(
            "chapter1.pdf", "dev/json/chapter1"
        )
    )

    assert len(calls) == 1
    assert calls[0][1].endswith("/dev/json/chapter1/")
    assert shards == ["dev/json/chapter1/output-1-to-2.json"]
