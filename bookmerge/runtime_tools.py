"""External media tool resolution.

Responsibilities:
- Locate `ffmpeg` and `ffprobe` with environment-override, bundled, then PATH precedence.
- Support frozen app layouts (for example PyInstaller) and local development runs.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import shutil
import sys
from typing import Mapping


_ENV_OVERRIDES = {
    "ffmpeg": "BOOKMERGE_FFMPEG",
    "ffprobe": "BOOKMERGE_FFPROBE",
}


@dataclass(frozen=True, slots=True)
class MediaTools:
    """Resolved executable paths for media collaborators.

    Attributes:
        ffmpeg: Executable used for transcoding and muxing.
        ffprobe: Executable used for duration and stream probing.
    """

    ffmpeg: str
    ffprobe: str

    @classmethod
    def discover(cls, env: Mapping[str, str] | None = None) -> MediaTools:
        """Resolve both media tools from the current runtime."""

        return cls(
            ffmpeg=resolve_executable("ffmpeg", env=env),
            ffprobe=resolve_executable("ffprobe", env=env),
        )


def resolve_executable(command_name: str, env: Mapping[str, str] | None = None) -> str:
    """Resolve one executable path.

    Resolution order:
    1. `BOOKMERGE_FFMPEG` / `BOOKMERGE_FFPROBE` environment override.
    2. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    3. System `PATH`.
    4. Raw command name, leaving the missing-binary error to `subprocess`.
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    env_map: Mapping[str, str] = os.environ if env is None else env
    override_key = _ENV_OVERRIDES.get(normalized.lower())
    if override_key is not None:
        override = env_map.get(override_key, "").strip()
        if override:
            return override

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    return shutil.which(normalized) or normalized


def _bundled_candidates(command_name: str) -> list[Path]:
    """Return bundled candidate paths, `bin/` first, with a Windows `.exe` variant."""

    names = [command_name]
    if not command_name.lower().endswith(".exe"):
        names.append(f"{command_name}.exe")

    app_root = _app_root()
    return [app_root / "bin" / name for name in names] + [app_root / name for name in names]


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
