"""PyAudio playback backend.

Plays synthesized speech through PortAudio on macOS, Linux and the
Raspberry Pi.
"""

import threading
from typing import Any

# PyAudio import with fallback for type hints
try:
    import pyaudio

    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    pyaudio = None

CHUNK_FRAMES = 1024


class PyAudioPlayback:
    """Audio playback using PyAudio.

    Implements the AudioPlayback protocol. ``play`` blocks and is meant to
    run in a worker thread; ``stop`` may be called from any thread.
    """

    def __init__(self, device_name: str = "default") -> None:
        """Initialize playback.

        Args:
            device_name: Audio output device name or "default"

        Raises:
            RuntimeError: If PyAudio is not available
        """
        if not PYAUDIO_AVAILABLE:
            raise RuntimeError("PyAudio not available. Install with: pip install pyaudio")

        self._device_name = device_name
        self._is_playing = False
        self._stop_flag = threading.Event()

    def _get_device_index(self, pa: Any) -> int | None:
        """Get device index for configured device name."""
        if self._device_name == "default":
            return None

        for i in range(pa.get_device_count()):
            info = pa.get_device_info_by_index(i)
            if self._device_name.lower() in info["name"].lower() and info["maxOutputChannels"] > 0:
                return i

        return None

    def play(self, audio: bytes, sample_rate: int) -> None:
        """Play audio synchronously until done or stopped."""
        self._is_playing = True
        self._stop_flag.clear()

        pa = pyaudio.PyAudio()
        try:
            stream = pa.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=sample_rate,
                output=True,
                output_device_index=self._get_device_index(pa),
            )

            try:
                for i in range(0, len(audio), CHUNK_FRAMES * 2):
                    if self._stop_flag.is_set():
                        break
                    stream.write(audio[i : i + CHUNK_FRAMES * 2])
            finally:
                stream.stop_stream()
                stream.close()
        finally:
            pa.terminate()
            self._is_playing = False

    def stop(self) -> None:
        """Stop current playback."""
        self._stop_flag.set()

    @property
    def is_playing(self) -> bool:
        """Return True if audio is playing."""
        return self._is_playing


__all__ = ["PYAUDIO_AVAILABLE", "PyAudioPlayback"]
