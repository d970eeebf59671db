"""Filesystem discovery for source chapter audio."""

from .discovery import chapter_title_for, collect_audio_files, find_cover_image

__all__ = ["chapter_title_for", "collect_audio_files", "find_cover_image"]
