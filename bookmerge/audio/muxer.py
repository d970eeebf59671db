"""Final audiobook mux stage.

Responsibilities:
- Build the ffmpeg concat + chapter-metadata + cover command.
- Run it and map failures to stage-aware diagnostics.
"""

from __future__ import annotations

from pathlib import Path
import subprocess

from ..errors import PipelineStageError
from ..parsing import normalize_optional_string
from ..runtime_tools import resolve_executable


class AudioMuxer:
    """Concatenate chapter audio into one container with chapters and cover art."""

    def __init__(self, ffmpeg: str | None = None) -> None:
        self._ffmpeg = ffmpeg or resolve_executable("ffmpeg")

    def build_command(
        self,
        *,
        concat_path: Path,
        metadata_path: Path,
        output_path: Path,
        album_title: str,
        cover_path: Path | None = None,
    ) -> list[str]:
        """Build the merge command; audio is stream-copied, cover is attached as mjpeg."""

        command = [
            self._ffmpeg,
            "-y",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(concat_path),
        ]
        if cover_path is not None:
            command += [
                "-i",
                str(cover_path),
                "-i",
                str(metadata_path),
                "-map",
                "0:a",
                "-map",
                "1",
                "-map_metadata",
                "2",
            ]
        else:
            command += [
                "-i",
                str(metadata_path),
                "-map",
                "0:a",
                "-map_metadata",
                "1",
            ]

        command += ["-c:a", "copy"]
        if cover_path is not None:
            command += ["-c:v", "mjpeg", "-disposition:v:0", "attached_pic"]
        command += ["-metadata", f"title={album_title}", str(output_path)]
        return command

    def merge(
        self,
        *,
        concat_path: Path,
        metadata_path: Path,
        output_path: Path,
        album_title: str,
        cover_path: Path | None = None,
    ) -> Path:
        """Run the merge command and return the output path."""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        command = self.build_command(
            concat_path=concat_path,
            metadata_path=metadata_path,
            output_path=output_path,
            album_title=album_title,
            cover_path=cover_path,
        )
        try:
            subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise PipelineStageError.missing_tool(
                stage="merge", tool="ffmpeg", role="Merge"
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = normalize_optional_string(exc.stderr) or "no stderr output"
            raise PipelineStageError(
                stage="merge",
                detail=f"ffmpeg merge failed for `{output_path.name}`: {stderr}",
                hint="Verify the sources share a codec, or rerun with `--reencode`.",
            ) from exc
        return output_path
