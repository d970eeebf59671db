"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chapter title previews, and merge summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import ChapterTitle, MergeResult


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


def echo_merge_summary(result: MergeResult) -> None:
    """Print merged output location, counters, and chapter rows."""

    typer.echo(f"Audiobook: {result.output_path}")
    typer.echo(f"Cover: {result.cover_path or '(none)'}")
    typer.echo(f"Sources: {result.source_count} (re-encoded: {result.reencoded_count})")
    typer.echo(f"Chapters: {len(result.chapters)}")
    if result.skipped_chapter_count:
        typer.echo(f"Chapters without duration: {result.skipped_chapter_count}")
    for chapter in result.chapters:
        typer.echo(f"{chapter.index}. {chapter.title}")


def echo_title_preview(titles: list[ChapterTitle]) -> None:
    """Print raw-to-display title rows in source order."""

    for title in sorted(titles, key=lambda item: item.index):
        marker = "" if title.cleaned_title else " (fallback)"
        typer.echo(f"{title.index}. {title.raw_title} -> {title.display_title}{marker}")
