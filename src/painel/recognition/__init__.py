"""Speech recognition module for the Painel voice assistant.

Provides recognition sessions on top of swappable engines:
- Microphone capture transcribed by faster-whisper
- Console input for development
- Mock engines for testing
"""

import logging
from typing import TYPE_CHECKING

from .engine import (
    EngineFactory,
    RecognitionBusyError,
    RecognitionEngine,
    RecognitionError,
    RecognitionMode,
    RecognitionResult,
    RecognitionSettings,
)
from .mock import MockEngineFactory, MockRecognitionEngine
from .session import (
    RecognitionEnded,
    RecognitionEvent,
    RecognitionFailed,
    RecognitionSession,
    Utterance,
    UtteranceReceived,
)

if TYPE_CHECKING:
    from ..config import RecognitionConfig

logger = logging.getLogger(__name__)


def create_engine_factory(
    config: "RecognitionConfig | None" = None,
    use_mock: bool = False,
) -> EngineFactory | None:
    """Create the engine factory for recognition sessions.

    Args:
        config: Recognition configuration
        use_mock: If True, return a mock factory for testing

    Returns:
        A factory producing one engine per session, or None when no speech
        engine is available on this machine. None disables the voice
        subsystem.
    """
    engine = config.engine if config is not None else "auto"

    if use_mock or engine == "mock":
        logger.info("Recognition: using MockEngineFactory")
        return MockEngineFactory()

    if engine == "console":
        from .console import ConsoleRecognitionEngine

        logger.info("Recognition: using console input")
        return lambda _mode: ConsoleRecognitionEngine()

    from . import whisper

    if not whisper.is_available():
        logger.warning(
            "Recognition: faster-whisper/pyaudio not available (whisper=%s, pyaudio=%s)",
            whisper.FASTER_WHISPER_AVAILABLE,
            whisper.PYAUDIO_AVAILABLE,
        )
        return None

    logger.info("Recognition: using WhisperRecognitionEngine")
    return lambda _mode: whisper.WhisperRecognitionEngine(config)


__all__ = [
    "EngineFactory",
    "MockEngineFactory",
    "MockRecognitionEngine",
    "RecognitionBusyError",
    "RecognitionEnded",
    "RecognitionEngine",
    "RecognitionError",
    "RecognitionEvent",
    "RecognitionFailed",
    "RecognitionMode",
    "RecognitionResult",
    "RecognitionSession",
    "RecognitionSettings",
    "Utterance",
    "UtteranceReceived",
    "create_engine_factory",
]
