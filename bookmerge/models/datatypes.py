"""Core datatypes shared across bookmerge modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Keep stage inputs and outputs explicit for deterministic replay and testing.

Key types:
- `ChapterTitle`, `AudioStreamInfo`, `ChapterSource`, `ChapterMarker`,
  and `MergeResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ChapterTitle:
    """Title derivation record for one source file.

    Attributes:
        index: 1-based position in the sorted source batch.
        source_path: Source audio file the title was derived from.
        raw_title: Filename stem used as the unprocessed title.
        cleaned_title: Title after batch-wide boilerplate stripping, possibly empty.
        display_title: Title written to chapter metadata after fallback.
    """

    index: int
    source_path: Path
    raw_title: str
    cleaned_title: str
    display_title: str


@dataclass(frozen=True, slots=True)
class AudioStreamInfo:
    """First audio stream details reported by the prober.

    Attributes:
        codec_name: Codec identifier (for example `mp3` or `aac`).
        bit_rate: Stream bitrate in bits per second, when reported.
    """

    codec_name: str
    bit_rate: int | None = None


@dataclass(frozen=True, slots=True)
class ChapterSource:
    """One concatenation input paired with its chapter title.

    Attributes:
        title: Title derivation record for the source file.
        audio_path: File actually fed to concatenation (transcoded or original).
        reencoded: Whether `audio_path` is a transcoded temporary file.
    """

    title: ChapterTitle
    audio_path: Path
    reencoded: bool


@dataclass(frozen=True, slots=True)
class ChapterMarker:
    """Chapter entry for the merged container, in milliseconds."""

    index: int
    title: str
    start_ms: int
    end_ms: int

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Deterministic record of one merge run.

    Attributes:
        output_path: Merged audiobook path.
        chapters: Chapter markers written to the container.
        cover_path: Cover image attached to the output, if any.
        source_count: Number of source files concatenated.
        reencoded_count: Number of sources replaced by transcoded files.
        skipped_chapter_count: Sources concatenated without a chapter marker.
        titles: Title derivation records in source order.
    """

    output_path: Path
    chapters: tuple[ChapterMarker, ...]
    cover_path: Path | None
    source_count: int
    reencoded_count: int
    skipped_chapter_count: int
    titles: tuple[ChapterTitle, ...] = field(default_factory=tuple)
