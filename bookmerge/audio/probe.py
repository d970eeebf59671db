"""ffprobe-backed duration and stream inspection.

Responsibilities:
- Read container duration in milliseconds for chapter layout.
- Read first audio stream codec and bitrate for re-encoding decisions.
"""

from __future__ import annotations

from pathlib import Path
import subprocess

from ..errors import PipelineStageError
from ..models.datatypes import AudioStreamInfo
from ..runtime_tools import resolve_executable


class AudioProber:
    """Query media files with `ffprobe`; unreadable files yield `None`."""

    def __init__(self, ffprobe: str | None = None) -> None:
        self._ffprobe = ffprobe or resolve_executable("ffprobe")

    def duration_ms(self, audio_path: Path) -> int | None:
        """Return rounded container duration in milliseconds."""

        output = self._probe(
            audio_path,
            ["-show_entries", "format=duration"],
        )
        if output is None:
            return None
        try:
            seconds = float(output.strip())
        except ValueError:
            return None
        if seconds < 0:
            return None
        return int(round(seconds * 1000.0))

    def stream_info(self, audio_path: Path) -> AudioStreamInfo | None:
        """Return codec and bitrate of the first audio stream."""

        output = self._probe(
            audio_path,
            ["-select_streams", "a:0", "-show_entries", "stream=codec_name,bit_rate"],
        )
        if output is None:
            return None
        lines = output.splitlines()
        if not lines or not lines[0].strip():
            return None

        bit_rate: int | None = None
        if len(lines) > 1:
            try:
                bit_rate = int(lines[1].strip())
            except ValueError:
                bit_rate = None
        return AudioStreamInfo(codec_name=lines[0].strip(), bit_rate=bit_rate)

    def _probe(self, audio_path: Path, entries: list[str]) -> str | None:
        """Run one ffprobe query and return stdout, or `None` on tool failure."""

        command = [
            self._ffprobe,
            "-v",
            "error",
            *entries,
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(audio_path),
        ]
        try:
            completed = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise PipelineStageError.missing_tool(
                stage="metadata", tool="ffprobe", role="Probe"
            ) from exc
        if completed.returncode != 0:
            return None
        return completed.stdout
