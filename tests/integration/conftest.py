"""Integration-test fixtures for deterministic media tool behavior."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest


class FakeMediaTools:
    """Stand in for `ffmpeg`/`ffprobe` and record every invocation."""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.merged_concat_lists: list[str] = []
        self.merged_metadata: list[str] = []

    def run(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        """Emulate one tool call from its argument list."""

        _ = kwargs
        self.commands.append(list(command))
        if Path(command[0]).name == "ffprobe":
            return self._probe(command)
        if "concat" in command:
            return self._merge(command)
        return self._transcode(command)

    def _probe(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        if "broken" in Path(command[-1]).name:
            return subprocess.CompletedProcess(command, 1, stdout="", stderr="Invalid data\n")
        if "format=duration" in command:
            return subprocess.CompletedProcess(command, 0, stdout="1.5\n", stderr="")
        return subprocess.CompletedProcess(command, 0, stdout="mp3\n64000\n", stderr="")

    def _transcode(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        source = Path(command[command.index("-i") + 1])
        if "broken" in source.name:
            return subprocess.CompletedProcess(command, 1, stdout="", stderr="Invalid data\n")
        Path(command[-1]).write_bytes(source.read_bytes())
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    def _merge(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        input_paths = [command[index + 1] for index, arg in enumerate(command) if arg == "-i"]
        self.merged_concat_lists.append(Path(input_paths[0]).read_text(encoding="utf-8"))
        self.merged_metadata.append(Path(input_paths[-1]).read_text(encoding="utf-8"))
        Path(command[-1]).write_bytes(b"merged-audiobook")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


@pytest.fixture(autouse=True)
def media_tools(monkeypatch: pytest.MonkeyPatch) -> FakeMediaTools:
    """Mock media tool calls in integration tests so no ffmpeg install is required."""

    fake = FakeMediaTools()
    monkeypatch.setenv("BOOKMERGE_FFMPEG", "ffmpeg")
    monkeypatch.setenv("BOOKMERGE_FFPROBE", "ffprobe")
    monkeypatch.setattr(subprocess, "run", fake.run)
    return fake


@pytest.fixture
def chapter_dir(tmp_path: Path) -> Path:
    """Create a small chapter directory with a shared title prefix and a cover."""

    root = tmp_path / "book"
    (root / "disc2").mkdir(parents=True)
    (root / "Chapter 01 [Intro].mp3").write_bytes(b"intro")
    (root / "Chapter 02 The Road.mp3").write_bytes(b"road")
    (root / "disc2" / "Chapter 03 Home.MP3").write_bytes(b"home")
    (root / "readme.txt").write_text("not audio", encoding="utf-8")
    (root / "cover.jpg").write_bytes(b"jpeg")
    return root
