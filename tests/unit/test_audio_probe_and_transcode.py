"""Unit tests for ffprobe parsing and re-encode bitrate policy."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest

from bookmerge.audio.probe import AudioProber
from bookmerge.audio.transcode import AudioTranscoder
from bookmerge.errors import PipelineStageError
from bookmerge.models.datatypes import AudioStreamInfo


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    """Build a completed-process record for mocked subprocess calls."""

    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class _StaticProber(AudioProber):
    """Prober returning one fixed stream description."""

    def __init__(self, info: AudioStreamInfo | None) -> None:
        super().__init__(ffprobe="ffprobe")
        self._info = info

    def stream_info(self, audio_path: Path) -> AudioStreamInfo | None:
        _ = audio_path
        return self._info


def test_duration_ms_rounds_seconds_to_milliseconds(monkeypatch: pytest.MonkeyPatch) -> None:
    """Duration output should be parsed as seconds and rounded to milliseconds."""

    calls: list[list[str]] = []

    def _fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        _ = kwargs
        calls.append(command)
        return _completed(stdout="12.3456\n")

    monkeypatch.setattr(subprocess, "run", _fake_run)

    assert AudioProber(ffprobe="ffprobe").duration_ms(Path("a.mp3")) == 12346
    assert calls[0] == [
        "ffprobe",
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        "a.mp3",
    ]


@pytest.mark.parametrize(
    "completed",
    [_completed(returncode=1, stderr="Invalid data"), _completed(stdout="N/A\n")],
)
def test_duration_ms_returns_none_for_unreadable_files(
    monkeypatch: pytest.MonkeyPatch,
    completed: subprocess.CompletedProcess[str],
) -> None:
    """Tool failures and unparsable output should yield no duration."""

    monkeypatch.setattr(subprocess, "run", lambda *_, **__: completed)

    assert AudioProber(ffprobe="ffprobe").duration_ms(Path("broken.mp3")) is None


def test_stream_info_parses_codec_and_optional_bitrate(monkeypatch: pytest.MonkeyPatch) -> None:
    """Stream output should map to codec name and integer bitrate when present."""

    monkeypatch.setattr(subprocess, "run", lambda *_, **__: _completed(stdout="mp3\n192000\n"))
    prober = AudioProber(ffprobe="ffprobe")

    assert prober.stream_info(Path("a.mp3")) == AudioStreamInfo(codec_name="mp3", bit_rate=192000)

    monkeypatch.setattr(subprocess, "run", lambda *_, **__: _completed(stdout="flac\nN/A\n"))

    assert prober.stream_info(Path("a.flac")) == AudioStreamInfo(codec_name="flac", bit_rate=None)

    monkeypatch.setattr(subprocess, "run", lambda *_, **__: _completed(stdout=""))

    assert prober.stream_info(Path("silent.bin")) is None


def test_prober_reports_missing_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing ffprobe binary should become a metadata-stage error."""

    def _missing(*_: object, **__: object) -> None:
        raise FileNotFoundError("ffprobe")

    monkeypatch.setattr(subprocess, "run", _missing)

    with pytest.raises(PipelineStageError) as exc_info:
        AudioProber(ffprobe="ffprobe").duration_ms(Path("a.mp3"))
    assert exc_info.value.stage == "metadata"
    assert exc_info.value.detail == "Probe tool `ffprobe` is not available on PATH."
    assert exc_info.value.hint == (
        "Install ffmpeg (it ships both `ffmpeg` and `ffprobe`) "
        "or set `BOOKMERGE_FFPROBE` to the executable path."
    )


@pytest.mark.parametrize(
    ("info", "expected"),
    [
        (AudioStreamInfo(codec_name="mp3", bit_rate=192000), "192k"),
        (AudioStreamInfo(codec_name="mp3", bit_rate=64999), "64k"),
        (AudioStreamInfo(codec_name="flac", bit_rate=None), "128k"),
        (None, "128k"),
    ],
)
def test_target_bitrate_matches_source_or_falls_back(
    info: AudioStreamInfo | None, expected: str
) -> None:
    """Known bitrates should be kept in kilobits, unknown ones use the fallback."""

    transcoder = AudioTranscoder(prober=_StaticProber(info), ffmpeg="ffmpeg")

    assert transcoder.target_bitrate(Path("a.mp3")) == expected


def test_transcode_runs_audio_only_reencode(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Successful re-encoding should return the output path and pass codec/bitrate."""

    calls: list[list[str]] = []

    def _fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        _ = kwargs
        calls.append(command)
        return _completed()

    monkeypatch.setattr(subprocess, "run", _fake_run)
    transcoder = AudioTranscoder(
        codec="aac",
        prober=_StaticProber(AudioStreamInfo(codec_name="mp3", bit_rate=96000)),
        ffmpeg="ffmpeg",
    )
    target = tmp_path / "work" / "0001.m4a"

    assert transcoder.transcode(Path("in.mp3"), target) == target
    assert calls == [
        [
            "ffmpeg",
            "-i",
            "in.mp3",
            "-vn",
            "-map",
            "0:a",
            "-c:a",
            "aac",
            "-b:a",
            "96k",
            "-y",
            str(target),
        ]
    ]


def test_transcode_returns_none_when_ffmpeg_rejects_source(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """A nonzero ffmpeg exit should signal fallback to the original file."""

    monkeypatch.setattr(subprocess, "run", lambda *_, **__: _completed(returncode=1))
    transcoder = AudioTranscoder(prober=_StaticProber(None), ffmpeg="ffmpeg")

    assert transcoder.transcode(Path("in.mp3"), tmp_path / "out.m4a") is None
