"""Synthesizer protocol and data classes.

Defines the interface for text-to-speech synthesis.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class SynthesisResult:
    """Result of text-to-speech synthesis.

    Attributes:
        audio: Raw PCM audio bytes (16-bit mono)
        sample_rate: Audio sample rate in Hz
        duration_ms: Audio duration in milliseconds
        latency_ms: Synthesis latency in milliseconds
    """

    audio: bytes
    sample_rate: int
    duration_ms: int
    latency_ms: int


class Synthesizer(Protocol):
    """Interface for text-to-speech synthesis."""

    def synthesize(self, text: str) -> SynthesisResult:
        """Convert text to speech audio.

        Raises:
            RuntimeError: If synthesis fails
        """
        ...

    def set_voice(self, voice_id: str) -> None:
        """Set the voice to use for synthesis."""
        ...

    def set_speed(self, speed: float) -> None:
        """Set speech speed multiplier (1.0 = normal)."""
        ...

    def get_available_voices(self) -> list[str]:
        """Return list of available voice IDs."""
        ...


def normalize_locale(locale: str) -> str:
    """Normalize a locale tag for comparison ("pt-BR" -> "pt_br")."""
    return locale.replace("-", "_").lower()


def choose_voice(
    voices: list[tuple[str, str]],
    locale: str,
    preferred: str | None = None,
) -> str | None:
    """Pick a voice for a locale.

    Args:
        voices: (voice_id, locale) pairs offered by an engine
        locale: Desired locale tag (e.g., "pt-BR")
        preferred: Explicitly configured voice, used when offered

    Returns:
        The preferred voice, else the first exact-locale voice, else the
        first voice sharing the language, else None
    """
    if preferred and any(voice_id == preferred for voice_id, _ in voices):
        return preferred

    wanted = normalize_locale(locale)
    language = wanted.split("_")[0]

    for voice_id, voice_locale in voices:
        if normalize_locale(voice_locale) == wanted:
            return voice_id

    for voice_id, voice_locale in voices:
        if normalize_locale(voice_locale).split("_")[0] == language:
            return voice_id

    return None


__all__ = ["SynthesisResult", "Synthesizer", "choose_voice", "normalize_locale"]
