"""Top-level package for bookmerge.

This package merges a directory of per-chapter audio files into one chaptered
audiobook, deriving chapter titles from filenames. The main orchestration
entry point is `AudiobookPipeline`; title normalization lives in
`bookmerge.titles`.
"""

from .pipeline import AudiobookPipeline

__all__ = ["AudiobookPipeline", "__version__"]

__version__ = "0.1.0"
