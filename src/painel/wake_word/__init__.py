"""Wake phrase detection module for the Painel voice assistant.

Wake phrases are matched against ambient recognition transcripts.
"""

from .detector import (
    DEFAULT_PHRASES,
    DEFAULT_WINDOW_CHARS,
    WakePhraseDetector,
    matches_wake_phrase,
    normalize_transcript,
)

__all__ = [
    "DEFAULT_PHRASES",
    "DEFAULT_WINDOW_CHARS",
    "WakePhraseDetector",
    "matches_wake_phrase",
    "normalize_transcript",
]
