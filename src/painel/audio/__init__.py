"""Audio output module for the Painel voice assistant.

Usage:
    playback = create_audio_playback(config.audio)

    # For testing
    from painel.audio.mock import MockAudioPlayback
"""

import logging
from typing import TYPE_CHECKING

from .mock import MockAudioPlayback
from .playback import AudioPlayback

if TYPE_CHECKING:
    from ..config import AudioConfig

logger = logging.getLogger(__name__)


def create_audio_playback(
    config: "AudioConfig | None" = None,
    use_mock: bool = False,
) -> AudioPlayback:
    """Create an audio playback instance.

    Args:
        config: Audio configuration (uses defaults if None)
        use_mock: If True, return mock implementation for testing

    Returns:
        AudioPlayback implementation. Falls back to the mock when PyAudio is
        not installed so the dashboard keeps running without sound.
    """
    device_name = config.output_device if config is not None else "default"

    if use_mock:
        return MockAudioPlayback()

    try:
        from .pyaudio_backend import PyAudioPlayback

        return PyAudioPlayback(device_name=device_name)
    except RuntimeError as e:
        logger.warning("Audio playback unavailable, using mock: %s", e)
        return MockAudioPlayback()


__all__ = [
    "AudioPlayback",
    "MockAudioPlayback",
    "create_audio_playback",
]
