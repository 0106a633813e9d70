"""Shared pytest fixtures for the full pdfaudify test suite."""

from __future__ import annotations

import os

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _isolate_runtime_environment(monkeypatch: pytest.MonkeyPatch):
    """Hide developer `PDFAUDIFY_*` settings and drop log sinks after each test."""

    for key in list(os.environ):
        if key.startswith("PDFAUDIFY_"):
            monkeypatch.delenv(key)
    yield
    logger.remove()
