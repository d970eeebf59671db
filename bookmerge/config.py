"""Configuration model and loaders for bookmerge.

Responsibilities:
- Define merge run configuration as a typed dataclass.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `BookmergeConfig`: normalized runtime settings for a merge run.
- `ConfigLoader`: static construction helpers for `BookmergeConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import re
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_extension,
    normalize_optional_string,
    parse_required_boolean,
    parse_threshold,
)


DEFAULT_TITLE_THRESHOLD = 0.8
DEFAULT_OUTPUT_FILENAME = "output.m4b"
_DEFAULT_ALBUM_TITLE = "Audiobook"
_DEFAULT_AUDIO_CODEC = "libfdk_aac"
_DEFAULT_FALLBACK_BITRATE = "128k"
_DEFAULT_EXTENSIONS = ("mp3", "m4a", "flac")
_DEFAULT_COVER_EXTENSIONS = ("jpg", "jpeg", "png", "webp")
_BITRATE_RE = re.compile(r"^[1-9][0-9]*k$")


@dataclass(slots=True)
class BookmergeConfig:
    """Runtime configuration for one merge run.

    Attributes:
        input_dir: Directory scanned recursively for chapter audio files.
        output_path: Merged audiobook path; defaults to `<input_dir>/output.m4b`.
        title_threshold: Batch occurrence ratio at which a leading word is stripped.
        album_title: Container-level title metadata.
        audio_codec: ffmpeg audio encoder used when re-encoding sources.
        fallback_bitrate: Encoder bitrate when a source bitrate is unknown.
        reencode: Whether sources are re-encoded before concatenation.
        extensions: Accepted source extensions, compared case-insensitively.
        cover_extensions: `cover.<ext>` lookup order inside `input_dir`.
        extra: Additional metadata for future extensions.
    """

    input_dir: Path
    output_path: Path | None = None
    title_threshold: float = DEFAULT_TITLE_THRESHOLD
    album_title: str = _DEFAULT_ALBUM_TITLE
    audio_codec: str = _DEFAULT_AUDIO_CODEC
    fallback_bitrate: str = _DEFAULT_FALLBACK_BITRATE
    reencode: bool = True
    extensions: tuple[str, ...] = _DEFAULT_EXTENSIONS
    cover_extensions: tuple[str, ...] = _DEFAULT_COVER_EXTENSIONS
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values before pipeline execution."""

        self.title_threshold = parse_threshold(self.title_threshold, "title_threshold")
        self._require_non_empty(self.album_title, "album_title")
        self._require_non_empty(self.audio_codec, "audio_codec")
        if not _BITRATE_RE.fullmatch(self.fallback_bitrate.strip()):
            raise ValueError(
                "`fallback_bitrate` must look like `<kilobits>k`, for example `128k`."
            )
        if not self.extensions:
            raise ValueError("`extensions` must list at least one audio extension.")
        if not self.cover_extensions:
            raise ValueError("`cover_extensions` must list at least one image extension.")

    def resolved_output_path(self) -> Path:
        """Return the merged output path, applying the input-directory default."""

        if self.output_path is not None:
            return self.output_path
        return self.input_dir / DEFAULT_OUTPUT_FILENAME

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `BookmergeConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"input_dir"})
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "input_dir",
            "output_path",
            "title_threshold",
            "album_title",
            "audio_codec",
            "fallback_bitrate",
            "reencode",
            "extensions",
            "cover_extensions",
            "extra",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> BookmergeConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> BookmergeConfig:
        """Create a validated config from `BOOKMERGE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        input_dir = ConfigLoader._optional_env_string(env_map, "BOOKMERGE_INPUT_DIR")
        if input_dir is None:
            raise ValueError("Environment variable `BOOKMERGE_INPUT_DIR` is required.")
        output_path = ConfigLoader._optional_env_string(env_map, "BOOKMERGE_OUTPUT_PATH")
        threshold_raw = ConfigLoader._optional_env_string(env_map, "BOOKMERGE_TITLE_THRESHOLD")
        reencode = ConfigLoader._optional_env_boolean(env_map, "BOOKMERGE_REENCODE")

        config = BookmergeConfig(
            input_dir=Path(input_dir),
            output_path=Path(output_path) if output_path is not None else None,
            title_threshold=(
                parse_threshold(threshold_raw, "BOOKMERGE_TITLE_THRESHOLD")
                if threshold_raw is not None
                else DEFAULT_TITLE_THRESHOLD
            ),
            album_title=(
                ConfigLoader._optional_env_string(env_map, "BOOKMERGE_ALBUM_TITLE")
                or _DEFAULT_ALBUM_TITLE
            ),
            audio_codec=(
                ConfigLoader._optional_env_string(env_map, "BOOKMERGE_AUDIO_CODEC")
                or _DEFAULT_AUDIO_CODEC
            ),
            fallback_bitrate=(
                ConfigLoader._optional_env_string(env_map, "BOOKMERGE_FALLBACK_BITRATE")
                or _DEFAULT_FALLBACK_BITRATE
            ),
            reencode=True if reencode is None else reencode,
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> BookmergeConfig:
        """Build a validated config from a normalized mapping payload."""

        ConfigLoader._validate_keys(payload, source_label)

        input_dir = ConfigLoader._optional_non_empty_string(payload, "input_dir")
        if input_dir is None:
            raise ValueError(f"{source_label} requires non-empty `input_dir`.")
        output_path = ConfigLoader._optional_non_empty_string(payload, "output_path")

        if "title_threshold" in payload:
            try:
                threshold = parse_threshold(payload["title_threshold"], "title_threshold")
            except ValueError as exc:
                raise ValueError(f"{source_label} field {exc}") from exc
        else:
            threshold = DEFAULT_TITLE_THRESHOLD

        config = BookmergeConfig(
            input_dir=Path(input_dir),
            output_path=Path(output_path) if output_path is not None else None,
            title_threshold=threshold,
            album_title=(
                ConfigLoader._optional_non_empty_string(payload, "album_title")
                or _DEFAULT_ALBUM_TITLE
            ),
            audio_codec=(
                ConfigLoader._optional_non_empty_string(payload, "audio_codec")
                or _DEFAULT_AUDIO_CODEC
            ),
            fallback_bitrate=(
                ConfigLoader._optional_non_empty_string(payload, "fallback_bitrate")
                or _DEFAULT_FALLBACK_BITRATE
            ),
            reencode=ConfigLoader._optional_boolean(
                payload, "reencode", source_label, default=True
            ),
            extensions=ConfigLoader._optional_extension_list(
                payload, "extensions", source_label, default=_DEFAULT_EXTENSIONS
            ),
            cover_extensions=ConfigLoader._optional_extension_list(
                payload, "cover_extensions", source_label, default=_DEFAULT_COVER_EXTENSIONS
            ),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        config.validate()
        return config

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required keys."""

        unknown = sorted(str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload)
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default
        return parse_required_boolean(payload[key], f"{source_label} field `{key}`")

    @staticmethod
    def _optional_extension_list(
        payload: Mapping[str, Any],
        key: str,
        source_label: str,
        default: tuple[str, ...],
    ) -> tuple[str, ...]:
        """Read a list of file extensions, lowercased and without leading dots."""

        if key not in payload or payload[key] is None:
            return default

        raw = payload[key]
        if isinstance(raw, str):
            raw = raw.split(",")
        if not isinstance(raw, (list, tuple)):
            raise ValueError(f"{source_label} field `{key}` must be a list of extensions.")

        normalized: list[str] = []
        for item in raw:
            extension = normalize_extension(item)
            if extension is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank extension.")
            if extension not in normalized:
                normalized.append(extension)
        if not normalized:
            raise ValueError(f"{source_label} field `{key}` must not be empty.")
        return tuple(normalized)

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        if key not in payload:
            return {}

        raw = payload[key]
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))

    @staticmethod
    def _optional_env_boolean(env: Mapping[str, str], key: str) -> bool | None:
        """Read an optional boolean from environment mapping."""

        if key not in env:
            return None
        return parse_required_boolean(env.get(key), f"Environment variable `{key}`")
