"""Stage telemetry helper methods for the merge pipeline.

Responsibilities:
- Map merge stages to 1-based progress positions.
- Emit stage start/complete/failure events, with per-stage counters on completion.
- Emit recoverable per-source warnings and the final run summary.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TypeVar

_StageResult = TypeVar("_StageResult")
_StageSummary = Callable[[_StageResult], Mapping[str, object]]


class PipelineTelemetryMixin:
    """Provide stage-telemetry helper methods for `AudiobookPipeline`."""

    _PHASE_SEQUENCE = (
        "discover",
        "titles",
        "transcode",
        "metadata",
        "merge",
    )

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        """Return 1-based stage index and total stage count for known stages."""

        if stage_name not in self._PHASE_SEQUENCE:
            return None
        return self._PHASE_SEQUENCE.index(stage_name) + 1, len(self._PHASE_SEQUENCE)

    def _on_stage_start(self, stage_name: str) -> None:
        stage_position = self._stage_position(stage_name)
        if stage_position and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, *stage_position)
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)

    def _on_stage_complete(self, stage_name: str, counters: Mapping[str, object]) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name, **counters)

    def _on_stage_failure(self, stage_name: str, exc: Exception) -> None:
        """Emit stage-failure event with the exception type only."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage_name, type(exc).__name__)

    def _warn(self, stage_name: str, event: str, **context: object) -> None:
        """Emit a recoverable warning for one source inside a stage."""

        if self._run_logger is not None:
            self._run_logger.log_warning(stage_name, event, **context)

    def _on_run_complete(self, **summary: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_run_summary(**summary)

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
        summarize: _StageSummary[_StageResult] | None = None,
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events.

        `summarize` turns the stage result into counters attached to the
        completion event, for example the number of discovered sources.
        """

        self._on_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            self._on_stage_failure(stage_name, exc)
            raise
        self._on_stage_complete(stage_name, summarize(result) if summarize else {})
        return result
