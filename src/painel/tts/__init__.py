"""Text-to-speech module for the Painel voice assistant.

Provides platform-adaptive speech synthesis:
- macOS: Native TTS with a pt-BR voice (e.g., "Luciana")
- Raspberry Pi / Linux: Piper TTS with a pt_BR neural voice
- Other: Falls back to Mock synthesizer
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..audio import create_audio_playback
from ..config.profiles import is_macos
from .channel import DoneCallback, SpeechChannel, SpeechDone, SynthesisChannel
from .mock import MockSynthesisChannel, MockSynthesizer
from .synthesizer import SynthesisResult, Synthesizer, choose_voice

if TYPE_CHECKING:
    from ..config import AudioConfig, TTSConfig

logger = logging.getLogger(__name__)


def _create_macos(voice: str | None, locale: str, rate: float) -> Synthesizer | None:
    try:
        from .macos import MacOSSynthesizer

        synth = MacOSSynthesizer(voice=voice, locale=locale, speed=rate)
        if synth.is_available:
            logger.info("TTS: Using MacOSSynthesizer (voice: %s)", synth.voice)
            return synth
        logger.warning("TTS: macOS say command not available")
    except Exception as e:
        logger.warning("TTS: MacOSSynthesizer failed to initialize: %s", e)
    return None


def _create_piper(
    voice: str | None, locale: str, rate: float, model_path: str | None
) -> Synthesizer | None:
    try:
        from .piper import PiperSynthesizer

        models_dir = Path(model_path).expanduser() if model_path else None
        synth = PiperSynthesizer(voice=voice, locale=locale, speed=rate, models_dir=models_dir)
        if synth.is_available:
            logger.info("TTS: Using PiperSynthesizer (voice: %s)", synth.voice)
            return synth
        logger.warning("TTS: Piper voice not available")
    except Exception as e:
        logger.warning("TTS: PiperSynthesizer failed to initialize: %s", e)
    return None


def create_synthesizer(
    config: "TTSConfig | None" = None,
    use_mock: bool = False,
) -> Synthesizer:
    """Create the appropriate synthesizer for the configured engine and platform.

    Args:
        config: TTS configuration (optional)
        use_mock: If True, force mock synthesizer for testing

    Returns:
        Synthesizer implementation. Never returns None; falls back to
        MockSynthesizer so the controller keeps cycling without sound.
    """
    engine = config.engine if config is not None else "auto"
    if use_mock or engine == "mock":
        logger.info("TTS: Using MockSynthesizer (requested)")
        return MockSynthesizer()

    voice = config.voice if config is not None else None
    locale = config.locale if config is not None else "pt-BR"
    rate = config.rate if config is not None else 1.0
    model_path = config.model_path if config is not None else None

    synth: Synthesizer | None = None
    if engine == "macos":
        synth = _create_macos(voice, locale, rate)
    elif engine == "piper":
        synth = _create_piper(voice, locale, rate, model_path)
    else:
        macos = is_macos()
        logger.debug("TTS: macOS voices %s", "available" if macos else "unavailable")
        if macos:
            synth = _create_macos(voice, locale, rate)
        if synth is None:
            synth = _create_piper(voice, locale, rate, model_path)

    if synth is None:
        logger.warning("TTS: Using MockSynthesizer (fallback)")
        return MockSynthesizer()
    return synth


def create_synthesis_channel(
    tts_config: "TTSConfig | None" = None,
    audio_config: "AudioConfig | None" = None,
    use_mock: bool = False,
) -> SpeechChannel:
    """Create the speech channel used by the dialogue controller.

    Args:
        tts_config: TTS configuration
        audio_config: Audio output configuration
        use_mock: If True, return a self-completing MockSynthesisChannel
    """
    if use_mock:
        return MockSynthesisChannel(auto_complete=True)
    return SynthesisChannel(
        synthesizer=create_synthesizer(tts_config),
        playback=create_audio_playback(audio_config),
    )


__all__ = [
    "DoneCallback",
    "MockSynthesisChannel",
    "MockSynthesizer",
    "SpeechChannel",
    "SpeechDone",
    "SynthesisChannel",
    "SynthesisResult",
    "Synthesizer",
    "choose_voice",
    "create_synthesis_channel",
    "create_synthesizer",
]
