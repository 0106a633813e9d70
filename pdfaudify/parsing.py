"""Shared parsing helpers for configuration values and storage object names."""

from __future__ import annotations

import posixpath
import re

from .errors import InvalidInputError

_OUTPUT_SEGMENT_PATTERN = re.compile(r"^output-(\d+)\.mp3$")
_CONCAT_SEGMENT_PATTERN = re.compile(r"^concat-(\d+)-(\d+)\.mp3$")
_FIRST_NUMBER_PATTERN = re.compile(r"(\d+)")


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def segment_range(path: str) -> tuple[int, int]:
    """Return the inclusive sequence-index range encoded in an audio segment name.

    `output-007.mp3` covers `(7, 7)` and `concat-001-032.mp3` covers `(1, 32)`.

    Raises:
        InvalidInputError: If the base name follows neither naming convention.
    """

    name = posixpath.basename(path)
    single = _OUTPUT_SEGMENT_PATTERN.match(name)
    if single is not None:
        index = int(single.group(1))
        return index, index
    merged = _CONCAT_SEGMENT_PATTERN.match(name)
    if merged is not None:
        return int(merged.group(1)), int(merged.group(2))
    raise InvalidInputError(f"Audio segment name has no sequence index: `{path}`.")


def shard_number(path: str) -> int:
    """Return the first number in an OCR shard base name, or 0 when it has none."""

    match = _FIRST_NUMBER_PATTERN.search(posixpath.basename(path))
    if match is None:
        return 0
    return int(match.group(1))


def directory_prefix(prefix: str) -> str:
    """Return `prefix` with exactly one trailing `/`.

    Listing `dev/json/book/` never matches siblings such as `dev/json/book-vol2/`.
    """

    return prefix.rstrip("/") + "/"
