"""Shared parsing helpers for config, environment, and CLI value normalization.

YAML payloads, `BOOKMERGE_*` environment variables, and CLI options all funnel
through these helpers so the same token is accepted (or rejected with the same
wording) regardless of where it came from.
"""

from __future__ import annotations

import math


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_BOOLEAN_HINT = "(`true`/`false`, `1`/`0`, `yes`/`no`)"


def normalize_optional_string(value: object) -> str | None:
    """Return `value` as a stripped string, or `None` when nothing is left."""

    if value is None:
        return None
    return str(value).strip() or None


def normalize_extension(value: object) -> str | None:
    """Return a file extension lowercased and without leading dots.

    `".MP3"`, `"mp3"` and `" Mp3 "` all normalize to `"mp3"`; blank input
    (including a lone `"."`) yields `None`.
    """

    text = normalize_optional_string(value)
    if text is None:
        return None
    return text.lstrip(".").lower() or None


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a boolean token case-insensitively; unknown tokens yield `None`."""

    if isinstance(value, bool):
        return value

    token = (normalize_optional_string(value) or "").lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_required_boolean(value: object, subject: str) -> bool:
    """Parse a boolean token or fail naming `subject`.

    Args:
        value: Raw YAML, environment, or CLI value.
        subject: Leading phrase of the error, e.g. ``"Environment variable `X`"``.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is None:
        raise ValueError(f"{subject} must be a boolean value {_BOOLEAN_HINT}.")
    return parsed


def parse_threshold(value: object, field_name: str) -> float:
    """Parse a cleaning threshold within `(0, 1]`.

    Booleans are rejected even though Python treats them as integers.

    Raises:
        ValueError: If the value is not numeric or falls outside `(0, 1]`.
    """

    message = f"`{field_name}` must be a number within (0, 1]"
    if isinstance(value, bool):
        raise ValueError(f"{message}.")
    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"{message}.")
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"{message}.") from exc

    if math.isnan(parsed) or not 0.0 < parsed <= 1.0:
        raise ValueError(f"{message}, got {parsed}.")
    return parsed
