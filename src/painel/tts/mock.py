"""Mock synthesizer and synthesis channel for testing.

MockSynthesizer renders silence sized to the text. MockSynthesisChannel
replaces the whole speak-and-play pipeline so controller tests decide
exactly when speech finishes.
"""

import asyncio
import time

from .channel import DoneCallback, SpeechDone
from .synthesizer import SynthesisResult


class MockSynthesizer:
    """Mock synthesizer for testing.

    Generates silent PCM whose length follows the text length.
    """

    def __init__(self, sample_rate: int = 22050) -> None:
        """Initialize mock synthesizer.

        Args:
            sample_rate: Output sample rate
        """
        self._sample_rate = sample_rate
        self._voice: str = "pt_BR-mock-medium"
        self._speed: float = 1.0
        self._synthesized: list[tuple[str, float]] = []
        self._fail_next = False

    def synthesize(self, text: str) -> SynthesisResult:
        """Synthesize text to silent audio.

        Raises:
            RuntimeError: If a failure was scheduled with fail_next()
        """
        start_time = time.time()
        if self._fail_next:
            self._fail_next = False
            raise RuntimeError("Mock synthesis failure")

        self._synthesized.append((text, self._speed))

        # Roughly 100ms per word at normal speed
        words = len(text.split())
        duration_ms = int(max(100, words * 100) / self._speed)
        num_samples = int(self._sample_rate * duration_ms / 1000)

        return SynthesisResult(
            audio=b"\x00\x00" * num_samples,
            sample_rate=self._sample_rate,
            duration_ms=duration_ms,
            latency_ms=int((time.time() - start_time) * 1000),
        )

    def fail_next(self) -> None:
        """Make the next synthesize() call raise."""
        self._fail_next = True

    def set_voice(self, voice_id: str) -> None:
        """Set voice."""
        self._voice = voice_id

    def set_speed(self, speed: float) -> None:
        """Set speech speed."""
        self._speed = max(0.5, min(2.0, speed))

    def get_available_voices(self) -> list[str]:
        """Return mock available voices."""
        return ["pt_BR-mock-medium", "pt_PT-mock-medium", "en_US-mock-medium"]

    @property
    def voice(self) -> str:
        """Get current voice."""
        return self._voice

    @property
    def speed(self) -> float:
        """Get current speed."""
        return self._speed

    @property
    def call_count(self) -> int:
        """Get number of successful synthesize calls."""
        return len(self._synthesized)

    @property
    def synthesized_texts(self) -> list[str]:
        """Get list of synthesized texts."""
        return [text for text, _ in self._synthesized]

    @property
    def synthesized(self) -> list[tuple[str, float]]:
        """Get (text, speed) pairs in synthesis order."""
        return self._synthesized.copy()

    def clear(self) -> None:
        """Reset mock state."""
        self._synthesized.clear()


class MockSynthesisChannel:
    """Synthesis channel double with manual or automatic completion.

    Each speak() supersedes the previous utterance, which reports a
    cancelled SpeechDone immediately. The current utterance finishes when
    complete() is called, or on the next loop iteration when auto_complete
    is set.
    """

    def __init__(self, auto_complete: bool = False) -> None:
        self._auto_complete = auto_complete
        self._on_done: DoneCallback | None = None
        self._next_token = 0
        self._pending: int | None = None
        self._spoken: list[tuple[str, float]] = []
        self._done: list[SpeechDone] = []

    def set_done_callback(self, callback: DoneCallback) -> None:
        self._on_done = callback

    def speak(self, text: str, rate: float = 1.0) -> int:
        self.cancel()
        self._next_token += 1
        token = self._next_token
        self._pending = token
        self._spoken.append((text, rate))
        if self._auto_complete:
            asyncio.get_running_loop().call_soon(self._finish, token, False)
        return token

    def cancel(self) -> None:
        if self._pending is not None:
            self._finish(self._pending, True)

    def complete(self) -> int | None:
        """Finish the current utterance.

        Returns:
            The finished token, or None if nothing was speaking
        """
        token = self._pending
        if token is not None:
            self._finish(token, False)
        return token

    def _finish(self, token: int, cancelled: bool) -> None:
        if self._pending != token:
            return
        self._pending = None
        done = SpeechDone(token=token, cancelled=cancelled)
        self._done.append(done)
        if self._on_done is not None:
            self._on_done(done)

    @property
    def is_speaking(self) -> bool:
        return self._pending is not None

    @property
    def spoken(self) -> list[tuple[str, float]]:
        """(text, rate) pairs in the order they were spoken."""
        return self._spoken.copy()

    @property
    def spoken_texts(self) -> list[str]:
        return [text for text, _ in self._spoken]

    @property
    def last_text(self) -> str | None:
        return self._spoken[-1][0] if self._spoken else None

    @property
    def done_events(self) -> list[SpeechDone]:
        return self._done.copy()


__all__ = ["MockSynthesisChannel", "MockSynthesizer"]
