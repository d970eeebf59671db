"""ffmpeg concat-list and FFMETADATA rendering.

Responsibilities:
- Lay out chapter markers back to back on a millisecond timebase.
- Render concat demuxer input lists and `;FFMETADATA1` chapter files.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..models.datatypes import ChapterMarker

FFMETADATA_HEADER = ";FFMETADATA1"


def escape_value(value: str) -> str:
    """Escape one FFMETADATA value."""

    escaped = value.replace("\\", "\\\\").replace("\n", "\\n")
    return escaped.replace("=", "\\=").replace(";", "\\;").replace("#", "\\#")


def layout_chapters(entries: Iterable[tuple[str, int | None]]) -> tuple[list[ChapterMarker], int]:
    """Place titled durations back to back starting at zero.

    Entries with an unknown duration get no marker and do not advance the
    cursor. Returns the markers and the number of skipped entries.
    """

    markers: list[ChapterMarker] = []
    skipped = 0
    cursor = 0
    for title, duration_ms in entries:
        if duration_ms is None:
            skipped += 1
            continue
        end = cursor + duration_ms
        markers.append(
            ChapterMarker(index=len(markers) + 1, title=title, start_ms=cursor, end_ms=end)
        )
        cursor = end
    return markers, skipped


def render_ffmetadata(chapters: Iterable[ChapterMarker]) -> str:
    """Render chapter markers as an FFMETADATA document."""

    lines = [FFMETADATA_HEADER]
    for chapter in chapters:
        lines.append("[CHAPTER]")
        lines.append("TIMEBASE=1/1000")
        lines.append(f"START={chapter.start_ms}")
        lines.append(f"END={chapter.end_ms}")
        lines.append(f"title={escape_value(chapter.title)}")
    return "\n".join(lines) + "\n"


def render_concat_list(paths: Iterable[Path]) -> str:
    """Render an ffmpeg concat demuxer input list."""

    return "".join(f"file '{_escape_concat_path(path)}'\n" for path in paths)


def _escape_concat_path(path: Path) -> str:
    """Escape one file path for ffmpeg concat list format."""

    return str(path).replace("'", "'\\''")
