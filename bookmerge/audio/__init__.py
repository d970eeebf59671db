"""Audio probing, re-encoding, metadata rendering, and muxing collaborators."""

from .ffmetadata import layout_chapters, render_concat_list, render_ffmetadata
from .muxer import AudioMuxer
from .probe import AudioProber
from .transcode import AudioTranscoder

__all__ = [
    "AudioMuxer",
    "AudioProber",
    "AudioTranscoder",
    "layout_chapters",
    "render_concat_list",
    "render_ffmetadata",
]
