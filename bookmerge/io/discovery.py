"""Source audio discovery for merge runs.

Responsibilities:
- Collect chapter audio files below an input directory in deterministic order.
- Locate an optional `cover.<ext>` image.
- Derive raw chapter titles from filenames.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..errors import PipelineStageError
from ..parsing import normalize_extension


def collect_audio_files(
    input_dir: Path,
    extensions: Iterable[str],
    exclude: Path | None = None,
) -> list[Path]:
    """Return accepted audio files below `input_dir`, sorted by file name.

    Extensions are compared case-insensitively without the leading dot. Ties on
    file name across subdirectories are broken by full path.
    """

    if not input_dir.is_dir():
        raise PipelineStageError(
            stage="discover",
            detail=f"`{input_dir}` is not a valid directory.",
            hint="Pass a directory containing chapter audio files.",
        )

    accepted = {normalize_extension(extension) for extension in extensions} - {None}
    excluded = exclude.resolve() if exclude is not None else None
    files = [
        path
        for path in input_dir.rglob("*")
        if path.is_file()
        and normalize_extension(path.suffix) in accepted
        and (excluded is None or path.resolve() != excluded)
    ]
    if not files:
        supported = ", ".join(sorted(accepted))
        raise PipelineStageError(
            stage="discover",
            detail=f"No supported audio files found in `{input_dir}`.",
            hint=f"Supported extensions: {supported}.",
        )
    return sorted(files, key=lambda path: (path.name, str(path)))


def find_cover_image(input_dir: Path, extensions: Iterable[str]) -> Path | None:
    """Return the first existing `cover.<ext>` in `input_dir`, if any."""

    for extension in extensions:
        candidate = input_dir / f"cover.{extension.lstrip('.')}"
        if candidate.is_file():
            return candidate
    return None


def chapter_title_for(path: Path) -> str:
    """Return the raw chapter title for one source file."""

    return path.stem
