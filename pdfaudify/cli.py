"""Command-line interface for pdfaudify.

Responsibilities:
- Expose user-facing commands for the pipeline and its diagnostics.
- Convert CLI arguments into `PdfAudifyConfig` on top of file or environment values.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from .cli_rendering import (
    echo_chunk_plan,
    echo_fragments,
    echo_run_summary,
    exit_with_command_error,
)
from .config import ConfigLoader, PdfAudifyConfig
from .errors import PipelineStageError
from .pipeline.orchestrator import PdfAudifyPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="pdfaudify",
    no_args_is_help=True,
    help="Turn scanned PDFs into narrated MP3 files.",
)


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        typer.echo(
            f"[progress] command={self._command_name} "
            f"{stage_index}/{stage_total} stage={stage_name}"
        )


def _resolve_config(config_file: Path | None, overrides: dict[str, Any]) -> PdfAudifyConfig:
    """Resolve effective config from YAML or environment values plus CLI overrides."""

    label = f"config file `{config_file}`" if config_file is not None else "environment"
    try:
        if config_file is not None:
            return ConfigLoader.from_yaml(config_file, overrides)
        return ConfigLoader.from_env(overrides=overrides)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid {label}: {exc}",
            hint="Pass `--bucket` or `--local-root` and a `.pdf` source path.",
        ) from exc


@app.command("run")
def run_command(
    source_path: Annotated[
        str | None,
        typer.Argument(
            help="Storage path of the source PDF. Required unless provided by config.",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    bucket: Annotated[
        str | None, typer.Option("--bucket", help="GCS bucket holding the source PDF.")
    ] = None,
    local_root: Annotated[
        Path | None,
        typer.Option("--local-root", help="Local directory used instead of a bucket."),
    ] = None,
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Root prefix for OCR, segment, and output paths."),
    ] = None,
    language: Annotated[
        str | None, typer.Option("--language", help="Synthesis language code.")
    ] = None,
    delimiter: Annotated[
        str | None, typer.Option("--delimiter", help="Sentence delimiter.")
    ] = None,
    max_length: Annotated[
        int | None,
        typer.Option("--max-length", help="Maximum characters per synthesis request."),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", help="Maximum in-flight jobs per stage."),
    ] = None,
    max_attempts: Annotated[
        int | None,
        typer.Option("--max-attempts", help="Total attempts per job, including the first."),
    ] = None,
    max_combine: Annotated[
        int | None,
        typer.Option("--max-combine", help="Maximum segments merged per combine call."),
    ] = None,
    single_member_merge: Annotated[
        str | None,
        typer.Option(
            "--single-member-merge",
            help="How a one-segment merge group is written: `combine` or `copy`.",
        ),
    ] = None,
) -> None:
    """Run OCR, speech synthesis, and concatenation for one PDF."""

    overrides: dict[str, Any] = {
        "source_path": source_path,
        "bucket": bucket,
        "local_root": local_root,
        "path_prefix": prefix,
        "language_code": language,
        "delimiter": delimiter,
        "max_length": max_length,
        "concurrency": concurrency,
        "max_attempts": max_attempts,
        "max_combine": max_combine,
        "single_member_merge": single_member_merge,
    }
    try:
        config = _resolve_config(config_file, overrides)
        progress = StageProgressIndicator(command_name="run")
        pipeline = PdfAudifyPipeline(
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        result = pipeline.run(config)
    except Exception as exc:
        exit_with_command_error("run", exc)

    echo_run_summary(result)


@app.command("segment")
def segment_command(
    ocr_json: Annotated[Path, typer.Argument(help="Path to a local OCR JSON shard.")],
    delimiter: Annotated[
        str, typer.Option("--delimiter", help="Sentence delimiter.")
    ] = "。",
) -> None:
    """Print sentence fragments reconstructed from one OCR JSON shard."""

    try:
        fragments = PdfAudifyPipeline().segment_file(ocr_json, delimiter)
    except Exception as exc:
        exit_with_command_error("segment", exc)

    echo_fragments(fragments)


@app.command("plan")
def plan_command(
    ocr_json: Annotated[Path, typer.Argument(help="Path to a local OCR JSON shard.")],
    delimiter: Annotated[
        str, typer.Option("--delimiter", help="Sentence delimiter.")
    ] = "。",
    max_length: Annotated[
        int,
        typer.Option("--max-length", help="Maximum characters per synthesis request."),
    ] = 5000,
    audio_prefix: Annotated[
        str,
        typer.Option("--audio-prefix", help="Prefix used to render segment output paths."),
    ] = "mp3",
) -> None:
    """Print the chunks one OCR JSON shard would be synthesized as."""

    try:
        planned = PdfAudifyPipeline().plan_file(
            ocr_json,
            delimiter=delimiter,
            max_length=max_length,
            audio_prefix=audio_prefix,
        )
    except Exception as exc:
        exit_with_command_error("plan", exc)

    echo_chunk_plan(planned)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
