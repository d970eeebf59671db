"""Per-chapter audio re-encoding.

Responsibilities:
- Re-encode each source to a uniform codec before concatenation.
- Preserve the source bitrate when known, else use the configured fallback.
"""

from __future__ import annotations

from pathlib import Path
import subprocess

from ..errors import PipelineStageError
from ..runtime_tools import resolve_executable
from .probe import AudioProber


class AudioTranscoder:
    """Re-encode audio sources with `ffmpeg` at a bitrate matching the source."""

    def __init__(
        self,
        *,
        codec: str = "libfdk_aac",
        fallback_bitrate: str = "128k",
        prober: AudioProber | None = None,
        ffmpeg: str | None = None,
    ) -> None:
        self._codec = codec
        self._fallback_bitrate = fallback_bitrate
        self._prober = prober if prober is not None else AudioProber()
        self._ffmpeg = ffmpeg or resolve_executable("ffmpeg")

    def target_bitrate(self, source_path: Path) -> str:
        """Return the ffmpeg bitrate argument for one source."""

        info = self._prober.stream_info(source_path)
        if info is None or info.bit_rate is None or info.bit_rate < 1000:
            return self._fallback_bitrate
        return f"{info.bit_rate // 1000}k"

    def build_command(self, source_path: Path, output_path: Path, bitrate: str) -> list[str]:
        """Build the audio-only re-encode command."""

        return [
            self._ffmpeg,
            "-i",
            str(source_path),
            "-vn",
            "-map",
            "0:a",
            "-c:a",
            self._codec,
            "-b:a",
            bitrate,
            "-y",
            str(output_path),
        ]

    def transcode(self, source_path: Path, output_path: Path) -> Path | None:
        """Re-encode one source; return `None` when ffmpeg rejects it."""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        command = self.build_command(source_path, output_path, self.target_bitrate(source_path))
        try:
            completed = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise PipelineStageError.missing_tool(
                stage="transcode", tool="ffmpeg", role="Transcoding"
            ) from exc
        if completed.returncode != 0:
            return None
        return output_path
