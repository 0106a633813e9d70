"""End-to-end pipeline tests with deterministic OCR and speech doubles."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from pdfaudify import PdfAudifyPipeline
from pdfaudify.config import PdfAudifyConfig
from pdfaudify.errors import PipelineStageError
from pdfaudify.telemetry.logger import RunLogger

from tests.fakes import FakeOcrProvider, FakeSpeechProvider, InMemoryStorage, ocr_json


def _sentences(count: int, start: int = 0) -> list[tuple[str, float, float]]:
    """One page of `count` same-line words, each ending a sentence."""

    words = [(f"文{index:03d}", 0.1, 0.2) for index in range(start, start + count)]
    return words + [("。", 0.95, 1.0)]


def _shards() -> dict[str, str]:
    return {
        "output-1-to-2.json": ocr_json([_sentences(20), _sentences(20, 20)]),
        "output-3-to-4.json": ocr_json([_sentences(30, 40)]),
    }


def test_pipeline_runs_ocr_speech_and_merge_in_memory() -> None:
    """A fresh run should OCR, synthesize every chunk, and merge them into one object."""

    storage = InMemoryStorage({"uploads/book.pdf": b"%PDF"}, combine_limit=4)
    speech = FakeSpeechProvider()
    stages: list[tuple[str, int, int]] = []
    pipeline = PdfAudifyPipeline(
        stage_progress_callback=lambda name, index, total: stages.append((name, index, total)),
        storage=storage,
        ocr_provider=FakeOcrProvider(storage, _shards()),
        speech_provider=speech,
    )
    config = PdfAudifyConfig(
        source_path="uploads/book.pdf",
        bucket="books",
        max_length=25,
        concurrency=3,
        max_combine=4,
    )

    result = pipeline.run(config)

    assert stages == [("ocr", 1, 3), ("tts", 2, 3), ("concat", 3, 3)]
    assert result.ocr_shards == (
        "dev/json/book/output-1-to-2.json",
        "dev/json/book/output-3-to-4.json",
    )
    assert len(result.audio_segments) == len(speech.texts) > 4
    assert result.output_path == "dev/out/book.mp3"
    expected = b"".join(storage.objects[path] for path in result.audio_segments)
    assert storage.objects["dev/out/book.mp3"] == expected
    assert speech.peak_in_flight <= 3


def test_rerun_reuses_every_finished_artifact(tmp_path: Path) -> None:
    """A second run over a local root should neither OCR nor synthesize again."""

    shard_dir = tmp_path / "dev" / "json" / "book"
    shard_dir.mkdir(parents=True)
    for name, text in _shards().items():
        (shard_dir / name).write_text(text, encoding="utf-8")
    config = PdfAudifyConfig(source_path="uploads/book.pdf", local_root=tmp_path, max_length=40)

    first_speech = FakeSpeechProvider()
    first = PdfAudifyPipeline(speech_provider=first_speech).run(config)
    second_speech = FakeSpeechProvider()
    sink = io.StringIO()
    second = PdfAudifyPipeline(
        run_logger=RunLogger(sink=sink), speech_provider=second_speech
    ).run(config)

    assert first_speech.texts
    assert second_speech.texts == []
    assert second.audio_segments == first.audio_segments
    assert (tmp_path / "dev" / "out" / "book.mp3").read_bytes() == b"".join(
        (tmp_path / path).read_bytes() for path in first.audio_segments
    )
    log = sink.getvalue()
    assert "event=ocr_skip" in log
    assert "event=job_skip" in log
    assert "[phase] level=INFO stage=concat event=complete" in log


def test_local_run_without_shards_reports_ocr_stage_hint(tmp_path: Path) -> None:
    """Vision cannot read local files, so missing shards should fail at the OCR stage."""

    config = PdfAudifyConfig(source_path="uploads/book.pdf", local_root=tmp_path)

    with pytest.raises(PipelineStageError) as exc_info:
        PdfAudifyPipeline(speech_provider=FakeSpeechProvider()).run(config)

    assert exc_info.value.stage == "ocr"
    assert "dev/json/book" in (exc_info.value.hint or "")


def test_speech_outage_fails_tts_stage_after_retries() -> None:
    """Persistent synthesis failures should surface as a tts stage error."""

    storage = InMemoryStorage(
        {"dev/json/book/output-1-to-2.json": ocr_json([_sentences(2)]).encode()}
    )
    speech = FakeSpeechProvider(failures={"文000。文001。": 99})
    config = PdfAudifyConfig(source_path="book.pdf", bucket="books", max_attempts=2)

    with pytest.raises(PipelineStageError) as exc_info:
        PdfAudifyPipeline(storage=storage, speech_provider=speech).run(config)

    assert exc_info.value.stage == "tts"
    assert "after 2 attempt(s)" in exc_info.value.detail
    assert not any(name.startswith("dev/mp3") for name in storage.objects)


def test_text_free_document_fails_tts_stage() -> None:
    """Shards without words should not produce an empty narration."""

    storage = InMemoryStorage({"dev/json/book/output-1-to-2.json": ocr_json([[]]).encode()})

    with pytest.raises(PipelineStageError, match="contains no text"):
        PdfAudifyPipeline(storage=storage, speech_provider=FakeSpeechProvider()).run(
            PdfAudifyConfig(source_path="book.pdf", bucket="books")
        )


def test_invalid_config_fails_before_any_stage() -> None:
    """Config validation errors should map to the config stage."""

    with pytest.raises(PipelineStageError) as exc_info:
        PdfAudifyPipeline(storage=InMemoryStorage()).run(
            PdfAudifyConfig(source_path="book.pdf", bucket="books", concurrency=0)
        )

    assert exc_info.value.stage == "config"
