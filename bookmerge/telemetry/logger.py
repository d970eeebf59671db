"""Structured run logging for merge pipeline stages.

Every line has the shape `[phase] level=<L> stage=<S> event=<E> key=value ...`
so CLI output stays grep-friendly and stable across runs. Context keys are
sorted and values are reduced to shell-safe tokens (file names with spaces
become `Chapter_1_Dawn.mp3`).
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger

_SAFE_PUNCTUATION = frozenset("-_.:/")


def _sanitize_context_value(value: object) -> str:
    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in _SAFE_PUNCTUATION else "_"
        for character in raw
    )


def _format_line(level: str, stage: str, event: str, context: dict[str, object]) -> str:
    fields = [f"level={level}", f"stage={stage}", f"event={event}"]
    fields.extend(
        f"{key}={_sanitize_context_value(context[key])}" for key in sorted(context)
    )
    return "[phase] " + " ".join(fields)


class RunLogger:
    """Emit deterministic phase logs for CLI-observable merge activity."""

    def __init__(self, sink: TextIO | None = None) -> None:
        """Route `loguru` output to one plain-text sink (stdout by default)."""

        self._sink = sink or sys.stdout
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level="INFO", colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        _loguru_logger.log(level, _format_line(level, stage, event, context))

    def log_stage_start(self, stage: str) -> None:
        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **counters: object) -> None:
        """Emit a stage-complete event, e.g. `sources=12` after discovery."""

        self._emit("INFO", "complete", stage, **counters)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without the error detail, which the CLI prints."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_warning(self, stage: str, event: str, **context: object) -> None:
        """Emit a recoverable per-source warning inside a stage."""

        self._emit("WARNING", event, stage, **context)

    def log_run_summary(self, **summary: object) -> None:
        """Emit the final `stage=run event=summary` line of a merge run."""

        self._emit("INFO", "summary", "run", **summary)
