"""Merge pipeline orchestration.

Responsibilities:
- Discover chapter sources and derive cleaned chapter titles for the batch.
- Re-encode, probe, and lay out chapters before the final mux.
- Emit stage telemetry and map configuration failures to stage errors.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import tempfile

from ..audio.ffmetadata import layout_chapters, render_concat_list, render_ffmetadata
from ..audio.muxer import AudioMuxer
from ..audio.probe import AudioProber
from ..audio.transcode import AudioTranscoder
from ..config import BookmergeConfig
from ..errors import PipelineStageError
from ..io.discovery import chapter_title_for, collect_audio_files, find_cover_image
from ..models.datatypes import ChapterMarker, ChapterSource, ChapterTitle, MergeResult
from ..runtime_tools import MediaTools
from ..telemetry.logger import RunLogger
from ..titles import clean_titles
from .telemetry import PipelineTelemetryMixin


def display_title_for(index: int, raw_title: str, cleaned_title: str) -> str:
    """Resolve the chapter title shown to listeners.

    An empty cleaned title falls back to the raw title, then to `Chapter <index>`.
    """

    if cleaned_title:
        return cleaned_title
    if raw_title.strip():
        return raw_title.strip()
    return f"Chapter {index}"


class AudiobookPipeline(PipelineTelemetryMixin):
    """Merge a directory of chapter files into one chaptered audiobook."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        prober: AudioProber | None = None,
        transcoder: AudioTranscoder | None = None,
        muxer: AudioMuxer | None = None,
    ) -> None:
        """Initialize pipeline collaborators; missing ones are built per run."""

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._prober = prober
        self._transcoder = transcoder
        self._muxer = muxer

    def preview_titles(self, config: BookmergeConfig) -> list[ChapterTitle]:
        """Return title derivation records without touching any external tool."""

        self._validate_config(config)
        sources = collect_audio_files(
            config.input_dir,
            config.extensions,
            exclude=config.resolved_output_path(),
        )
        return self._derive_titles(sources, config.title_threshold)

    def run(self, config: BookmergeConfig) -> MergeResult:
        """Run every merge stage and return the run record."""

        self._validate_config(config)
        output_path = config.resolved_output_path()
        tools = MediaTools.discover()
        prober = self._prober if self._prober is not None else AudioProber(tools.ffprobe)

        sources = self._run_stage(
            "discover",
            lambda: self._discover(config, output_path),
            summarize=lambda found: {"sources": len(found)},
        )
        titles = self._run_stage(
            "titles",
            lambda: self._derive_titles(sources, config.title_threshold),
            summarize=lambda derived: {
                "fallbacks": sum(1 for title in derived if not title.cleaned_title)
            },
        )
        cover_path = find_cover_image(config.input_dir, config.cover_extensions)

        with tempfile.TemporaryDirectory(prefix="bookmerge-") as work_root:
            work_dir = Path(work_root)
            chapter_sources = self._run_stage(
                "transcode",
                lambda: self._transcode(titles, config, prober, tools, work_dir),
                summarize=lambda encoded: {
                    "reencoded": sum(1 for source in encoded if source.reencoded)
                },
            )
            concat_path, metadata_path, markers, skipped = self._run_stage(
                "metadata",
                lambda: self._write_metadata(chapter_sources, prober, work_dir),
                summarize=lambda written: {"chapters": len(written[2]), "skipped": written[3]},
            )
            muxer = self._muxer if self._muxer is not None else AudioMuxer(tools.ffmpeg)
            self._run_stage(
                "merge",
                lambda: muxer.merge(
                    concat_path=concat_path,
                    metadata_path=metadata_path,
                    output_path=output_path,
                    album_title=config.album_title,
                    cover_path=cover_path,
                ),
            )

        result = MergeResult(
            output_path=output_path,
            chapters=tuple(markers),
            cover_path=cover_path,
            source_count=len(chapter_sources),
            reencoded_count=sum(1 for source in chapter_sources if source.reencoded),
            skipped_chapter_count=skipped,
            titles=tuple(titles),
        )
        self._on_run_complete(chapters=len(result.chapters), output=result.output_path)
        return result

    def _validate_config(self, config: BookmergeConfig) -> None:
        """Validate configuration and map failures to a stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update merge options and rerun the command.",
            ) from exc

    def _discover(self, config: BookmergeConfig, output_path: Path) -> list[Path]:
        """Remove a stale output file and collect sorted source files."""

        if output_path.exists():
            try:
                output_path.unlink()
            except OSError as exc:
                raise PipelineStageError(
                    stage="discover",
                    detail=f"Error removing existing file `{output_path}`: {exc}",
                    hint="Remove the file manually or choose another `--out` path.",
                ) from exc
        return collect_audio_files(config.input_dir, config.extensions, exclude=output_path)

    def _derive_titles(self, sources: list[Path], threshold: float) -> list[ChapterTitle]:
        """Clean filename-derived titles as one batch."""

        raw_titles = [chapter_title_for(path) for path in sources]
        cleaned = clean_titles(raw_titles, threshold)
        return [
            ChapterTitle(
                index=index,
                source_path=path,
                raw_title=raw_title,
                cleaned_title=cleaned_title,
                display_title=display_title_for(index, raw_title, cleaned_title),
            )
            for index, (path, raw_title, cleaned_title) in enumerate(
                zip(sources, raw_titles, cleaned), start=1
            )
        ]

    def _transcode(
        self,
        titles: list[ChapterTitle],
        config: BookmergeConfig,
        prober: AudioProber,
        tools: MediaTools,
        work_dir: Path,
    ) -> list[ChapterSource]:
        """Re-encode each source, keeping the original when re-encoding fails."""

        if not config.reencode:
            return [
                ChapterSource(title=title, audio_path=title.source_path, reencoded=False)
                for title in titles
            ]

        transcoder = self._transcoder
        if transcoder is None:
            transcoder = AudioTranscoder(
                codec=config.audio_codec,
                fallback_bitrate=config.fallback_bitrate,
                prober=prober,
                ffmpeg=tools.ffmpeg,
            )

        chapter_sources: list[ChapterSource] = []
        for title in titles:
            target = work_dir / f"{title.index:04d}.m4a"
            transcoded = transcoder.transcode(title.source_path, target)
            if transcoded is None:
                self._warn(
                    "transcode",
                    "reencode_failed",
                    source=title.source_path.name,
                    fallback="original",
                )
                chapter_sources.append(
                    ChapterSource(title=title, audio_path=title.source_path, reencoded=False)
                )
                continue
            chapter_sources.append(
                ChapterSource(title=title, audio_path=transcoded, reencoded=True)
            )
        return chapter_sources

    def _write_metadata(
        self,
        chapter_sources: list[ChapterSource],
        prober: AudioProber,
        work_dir: Path,
    ) -> tuple[Path, Path, list[ChapterMarker], int]:
        """Probe durations and write the concat list and chapter metadata files."""

        entries: list[tuple[str, int | None]] = []
        for source in chapter_sources:
            duration_ms = prober.duration_ms(source.audio_path)
            if duration_ms is None:
                self._warn(
                    "metadata",
                    "duration_unavailable",
                    source=source.title.source_path.name,
                )
            entries.append((source.title.display_title, duration_ms))
        markers, skipped = layout_chapters(entries)

        concat_path = work_dir / "concat.txt"
        concat_path.write_text(
            render_concat_list(source.audio_path.resolve() for source in chapter_sources),
            encoding="utf-8",
        )
        metadata_path = work_dir / "chapters.ffmetadata"
        metadata_path.write_text(render_ffmetadata(markers), encoding="utf-8")
        return concat_path, metadata_path, markers, skipped
