"""Object-finalize trigger glue.

Responsibilities:
- Accept a storage notification payload for a newly written object.
- Ignore objects that are not PDFs; run the pipeline for the rest.

Deployments bound to bucket notifications load `pdfaudify.handle_storage_event`
as their handler and pass the notification payload as `event`; settings come from
`PDFAUDIFY_*` variables.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from .config import ConfigLoader, PdfAudifyConfig
from .models.datatypes import PipelineResult
from .parsing import normalize_optional_string
from .pipeline.orchestrator import PdfAudifyPipeline
from .telemetry.logger import RunLogger


def handle_storage_event(
    event: Mapping[str, Any],
    config: PdfAudifyConfig | None = None,
    *,
    pipeline: PdfAudifyPipeline | None = None,
) -> PipelineResult | None:
    """Run the pipeline for a finalized `.pdf` object and return its result.

    Args:
        event: Notification payload carrying at least `name` and usually `bucket`.
        config: Base configuration; when omitted it is read from `PDFAUDIFY_*` variables.
        pipeline: Pipeline to run; defaults to one logging to stderr.

    Returns:
        The pipeline result, or `None` when the object is not a PDF.
    """

    name = normalize_optional_string(event.get("name"))
    if name is None or not name.lower().endswith(".pdf"):
        return None

    event_bucket = normalize_optional_string(event.get("bucket"))
    if config is None:
        resolved = ConfigLoader.from_env(overrides={"source_path": name, "bucket": event_bucket})
    elif config.bucket is not None and event_bucket is not None:
        resolved = replace(config, source_path=name, bucket=event_bucket)
    else:
        resolved = replace(config, source_path=name)

    active = pipeline if pipeline is not None else PdfAudifyPipeline(run_logger=RunLogger())
    return active.run(resolved)
