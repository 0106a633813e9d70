"""Domain exceptions for pipeline components and CLI diagnostics.

Responsibilities:
- Classify component failures as invalid input, transient provider failure,
  or exhausted retries.
- Carry stage-scoped detail and hints to the CLI boundary.
"""

from __future__ import annotations


class PdfAudifyError(RuntimeError):
    """Base class for all pdfaudify domain errors."""


class InvalidInputError(PdfAudifyError, ValueError):
    """Raised for malformed input that no amount of retrying can fix."""


class TransientProviderError(PdfAudifyError):
    """Raised when a storage, OCR, or speech boundary call fails."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        operation: str = "unknown",
    ) -> None:
        """Initialize provider failure metadata for retry and diagnostics."""

        super().__init__(message)
        self.provider = provider
        self.operation = operation


class RetryExhaustedError(PdfAudifyError):
    """Raised when a job keeps failing after its full attempt budget."""

    def __init__(
        self,
        key: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        """Initialize retry exhaustion metadata for the failing job."""

        detail = f"gave up on `{key}` after {attempts} attempt(s)"
        if last_error is not None:
            detail = f"{detail}: {last_error}"
        super().__init__(detail)
        self.key = key
        self.attempts = attempts
        self.last_error = last_error


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
