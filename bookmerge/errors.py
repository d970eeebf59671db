"""Domain exceptions for merge pipeline and CLI diagnostics."""

from __future__ import annotations

_TOOL_ENV_OVERRIDES = {"ffmpeg": "BOOKMERGE_FFMPEG", "ffprobe": "BOOKMERGE_FFPROBE"}


class PipelineStageError(RuntimeError):
    """Raised when one merge stage (`discover`, `titles`, ..., `merge`) fails.

    `detail` is shown after `<command> failed at stage `<stage>`:` and the
    optional `hint` on its own `Hint:` line.
    """

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint

    @classmethod
    def missing_tool(cls, *, stage: str, tool: str, role: str) -> PipelineStageError:
        """Build the error for an external media tool that could not be executed."""

        override = _TOOL_ENV_OVERRIDES.get(tool)
        hint = "Install ffmpeg (it ships both `ffmpeg` and `ffprobe`)"
        if override is not None:
            hint += f" or set `{override}` to the executable path"
        return cls(
            stage=stage,
            detail=f"{role} tool `{tool}` is not available on PATH.",
            hint=hint + ".",
        )
