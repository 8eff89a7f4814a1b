"""Mock audio playback for testing.

Records all audio that would be played for later verification.
"""


class MockAudioPlayback:
    """Mock audio playback.

    Implements the AudioPlayback protocol without touching a sound device.
    """

    def __init__(self) -> None:
        """Initialize mock playback."""
        self._is_playing = False
        self._played_audio: list[tuple[bytes, int]] = []
        self._stop_count = 0

    def play(self, audio: bytes, sample_rate: int) -> None:
        """Record audio that would be played."""
        self._played_audio.append((audio, sample_rate))

    def stop(self) -> None:
        """Stop mock playback."""
        self._stop_count += 1
        self._is_playing = False

    @property
    def is_playing(self) -> bool:
        """Return True if 'playing'."""
        return self._is_playing

    @property
    def play_count(self) -> int:
        """Get number of times play was called."""
        return len(self._played_audio)

    @property
    def stop_count(self) -> int:
        """Get number of times stop was called."""
        return self._stop_count

    def clear(self) -> None:
        """Reset recorded playback."""
        self._played_audio.clear()
        self._stop_count = 0


__all__ = ["MockAudioPlayback"]
