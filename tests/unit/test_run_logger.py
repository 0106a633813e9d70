"""Unit tests for structured run logging."""

from __future__ import annotations

import io

from pdfaudify.telemetry.logger import RunLogger, format_event_line


def test_format_event_line_sorts_and_sanitizes_context() -> None:
    """Context keys should be sorted and values reduced to shell-safe tokens."""

    line = format_event_line("INFO", "merge_level", "concat", outputs=3, inputs="65 segs", note="")

    assert line == (
        "[phase] level=INFO stage=concat event=merge_level inputs=65_segs note=none outputs=3"
    )


def test_run_logger_writes_stage_events_and_hides_debug_by_default() -> None:
    """Stage lifecycle lines should be emitted while debug lines stay hidden."""

    sink = io.StringIO()
    logger = RunLogger(sink=sink)

    logger.log_stage_start("ocr")
    logger.log_debug("tts", "segment_written", path="dev/mp3/b/output-001.mp3")
    logger.log_stage_complete("ocr", shards=2)
    logger.log_stage_failure("tts", "RetryExhaustedError")

    lines = sink.getvalue().splitlines()
    assert lines == [
        "[phase] level=INFO stage=ocr event=start",
        "[phase] level=INFO stage=ocr event=complete shards=2",
        "[phase] level=ERROR stage=tts event=failure error_type=RetryExhaustedError",
    ]


def test_run_logger_debug_level_includes_job_details() -> None:
    """A debug-level logger should include verbose job events."""

    sink = io.StringIO()
    RunLogger(sink=sink, level="DEBUG").log_debug("tts", "segment_written", chars=12)

    assert "level=DEBUG stage=tts event=segment_written chars=12" in sink.getvalue()
