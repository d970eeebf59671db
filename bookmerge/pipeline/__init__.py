"""Merge pipeline orchestration package."""

from .orchestrator import AudiobookPipeline, display_title_for

__all__ = ["AudiobookPipeline", "display_title_for"]
