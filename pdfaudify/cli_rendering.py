"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
run summaries, and planned chunk rows.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import Chunk, PipelineResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_summary(result: PipelineResult) -> None:
    """Print shard and segment counts plus the final output path."""

    typer.echo(f"OCR shards: {len(result.ocr_shards)}")
    typer.echo(f"Audio segments: {len(result.audio_segments)}")
    typer.echo(f"Output: {result.output_path}")


def echo_fragments(fragments: list[str]) -> None:
    """Print one sentence fragment per line."""

    for fragment in fragments:
        typer.echo(fragment)


def echo_chunk_plan(planned: list[tuple[Chunk, str]]) -> None:
    """Print compact chunk number, length, fragment count, and output path rows."""

    for chunk, output_path in planned:
        typer.echo(
            f"{chunk.number}. chars={len(chunk.text)} "
            f"fragments={chunk.fragment_count} -> {output_path}"
        )
    typer.echo(f"Chunks: {len(planned)}")
