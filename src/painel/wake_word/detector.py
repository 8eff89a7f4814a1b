"""Wake phrase detection over recognizer transcripts.

Detection is a pure text test so it can run against partial results from
any recognition engine without touching audio.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import WakeWordConfig

DEFAULT_PHRASES: tuple[str, ...] = ("olá smart home", "ola smart home")
DEFAULT_WINDOW_CHARS = 40

_NON_WORD = re.compile(r"[^\w]+")


def normalize_transcript(text: str) -> str:
    """Lower-case text, turn punctuation into spaces and collapse whitespace.

    Recognizers return text such as "Olá, Smart Home." that must match the
    plain phrase "olá smart home".
    """
    return " ".join(_NON_WORD.sub(" ", text.lower()).split())


def matches_wake_phrase(
    transcript: str,
    phrases: tuple[str, ...] | list[str] = DEFAULT_PHRASES,
    window_chars: int = DEFAULT_WINDOW_CHARS,
) -> bool:
    """Return True if the transcript tail contains an accepted wake phrase.

    Args:
        transcript: Concatenated transcript of the current ambient run
        phrases: Accepted spellings of the wake phrase
        window_chars: Size of the trailing window that is scanned

    Returns:
        True if any phrase occurs inside the trailing window
    """
    if not transcript or window_chars <= 0:
        return False

    tail = normalize_transcript(transcript)[-window_chars:]
    return any(
        normalized in tail
        for normalized in (normalize_transcript(phrase) for phrase in phrases)
        if normalized
    )


@dataclass(frozen=True)
class WakePhraseDetector:
    """Configured wake phrase matcher.

    Attributes:
        phrases: Accepted spellings of the wake phrase
        window_chars: Trailing window scanned on each transcript
    """

    phrases: tuple[str, ...] = field(default=DEFAULT_PHRASES)
    window_chars: int = DEFAULT_WINDOW_CHARS

    @classmethod
    def from_config(cls, config: "WakeWordConfig") -> "WakePhraseDetector":
        """Build a detector from wake word configuration."""
        return cls(phrases=tuple(config.phrases), window_chars=config.window_chars)

    def matches(self, transcript: str) -> bool:
        """Check a transcript against the configured phrases."""
        return matches_wake_phrase(transcript, self.phrases, self.window_chars)


__all__ = [
    "DEFAULT_PHRASES",
    "DEFAULT_WINDOW_CHARS",
    "WakePhraseDetector",
    "matches_wake_phrase",
    "normalize_transcript",
]
