"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

import pytest
import typer

from pdfaudify.cli_rendering import (
    echo_chunk_plan,
    echo_run_summary,
    exit_with_command_error,
)
from pdfaudify.errors import PipelineStageError
from pdfaudify.models.datatypes import Chunk, PipelinePaths, PipelineResult


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = PipelineStageError(
        stage="tts",
        detail="gave up on `dev/mp3/book/output-003.mp3` after 5 attempt(s)",
        hint="Verify Text-to-Speech access and quota, then rerun.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("run", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "run failed at stage `tts`" in captured.err
    assert "Hint: Verify Text-to-Speech access and quota, then rerun." in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("segment", RuntimeError("unexpected shard error"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "segment failed: unexpected shard error" in captured.err


def test_run_summary_and_chunk_plan_rows(capsys: pytest.CaptureFixture[str]) -> None:
    """Summaries should list counts, the output path, and one row per chunk."""

    paths = PipelinePaths.from_source("book.pdf")
    echo_run_summary(
        PipelineResult(
            paths=paths,
            ocr_shards=("a.json",),
            audio_segments=("1.mp3", "2.mp3"),
            output_path=paths.output_path,
        )
    )
    echo_chunk_plan([(Chunk(number=1, text="一文。二文。", fragment_start=0, fragment_end=2), "mp3/output-001.mp3")])

    output = capsys.readouterr().out
    assert "OCR shards: 1" in output
    assert "Audio segments: 2" in output
    assert "Output: dev/out/book.mp3" in output
    assert "1. chars=6 fragments=2 -> mp3/output-001.mp3" in output
    assert "Chunks: 1" in output
