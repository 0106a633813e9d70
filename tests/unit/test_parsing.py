"""Unit tests for shared value and object-name parsing helpers."""

import pytest

from pdfaudify.errors import InvalidInputError
from pdfaudify.models.datatypes import PipelinePaths
from pdfaudify.parsing import (
    directory_prefix,
    normalize_optional_string,
    segment_range,
    shard_number,
)


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string("  value  ") == "value"
    assert normalize_optional_string(42) == "42"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("dev/mp3/book/output-007.mp3", (7, 7)),
        ("dev/mp3/book/output-1234.mp3", (1234, 1234)),
        ("dev/mp3/my-book-2/concat-001-032.mp3", (1, 32)),
        ("concat-033-1000.mp3", (33, 1000)),
    ],
)
def test_segment_range_reads_base_name_only(path: str, expected: tuple[int, int]) -> None:
    """Digits and dashes in directory names should not affect the parsed range."""

    assert segment_range(path) == expected


@pytest.mark.parametrize("path", ["dev/mp3/book/cover.mp3", "output-.mp3", "concat-1.mp3"])
def test_segment_range_rejects_unknown_names(path: str) -> None:
    """Names without a sequence index are invalid input."""

    with pytest.raises(InvalidInputError, match="sequence index"):
        segment_range(path)


def test_shard_number_uses_first_number_in_base_name() -> None:
    """Shard numbers should come from the file name and default to zero."""

    assert shard_number("dev/json/book-9/output-12-to-13.json") == 12
    assert shard_number("dev/json/book/manifest.json") == 0


def test_pipeline_paths_are_derived_from_pdf_base_name() -> None:
    """Stage prefixes should live under the root prefix, keyed by the PDF base name."""

    paths = PipelinePaths.from_source("uploads/2024/report.pdf")

    assert paths.ocr_prefix == "dev/json/report"
    assert paths.audio_prefix == "dev/mp3/report"
    assert paths.output_path == "dev/out/report.mp3"
    assert PipelinePaths.from_source("a.pdf", "").output_path == "out/a.mp3"


@pytest.mark.parametrize("source", ["notes.txt", "uploads/.pdf"])
def test_pipeline_paths_reject_non_pdf_sources(source: str) -> None:
    """Only named PDF objects can be processed."""

    with pytest.raises(InvalidInputError):
        PipelinePaths.from_source(source)


@pytest.mark.parametrize(
    ("prefix", "expected"),
    [("dev/json/book", "dev/json/book/"), ("dev/json/book/", "dev/json/book/"), ("gs://b/x//", "gs://b/x/")],
)
def test_directory_prefix_ends_with_one_separator(prefix: str, expected: str) -> None:
    """Listing prefixes should stop at the directory boundary."""

    assert directory_prefix(prefix) == expected
    assert not "dev/json/book10/output-1-to-2.json".startswith(directory_prefix("dev/json/book"))
