"""Shared typed data models for bookmerge.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioStreamInfo,
    ChapterMarker,
    ChapterSource,
    ChapterTitle,
    MergeResult,
)

__all__ = [
    "AudioStreamInfo",
    "ChapterMarker",
    "ChapterSource",
    "ChapterTitle",
    "MergeResult",
]
