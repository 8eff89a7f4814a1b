"""Piper TTS synthesizer implementation.

Uses Piper for fast neural text-to-speech on CPU, the default engine on
the Raspberry Pi panel.
"""

import logging
import time
from pathlib import Path
from typing import Any

import numpy as np

from .synthesizer import SynthesisResult, choose_voice

logger = logging.getLogger(__name__)

PIPER_AVAILABLE = False
try:
    import piper

    PIPER_AVAILABLE = True
except ImportError:
    pass


class PiperSynthesizer:
    """Text-to-speech synthesizer using Piper voice models."""

    def __init__(
        self,
        voice: str | None = None,
        locale: str = "pt-BR",
        speed: float = 1.0,
        models_dir: Path | None = None,
    ) -> None:
        """Initialize Piper synthesizer.

        Args:
            voice: Voice model name (e.g., "pt_BR-faber-medium")
            locale: Locale used to pick a model when voice is not set
            speed: Speech speed multiplier
            models_dir: Directory containing Piper .onnx voice models
        """
        self._models_dir = models_dir or Path("models/piper")
        self._speed = max(0.5, min(2.0, speed))
        self._voice = choose_voice(self._installed_voices(), locale, preferred=voice) or voice
        self._piper: Any = None
        self._load_voice()

    def _installed_voices(self) -> list[tuple[str, str]]:
        """List (model_name, locale) pairs from the models directory."""
        if not self._models_dir.exists():
            return []
        # Piper model names start with their locale: "pt_BR-faber-medium"
        return [
            (model.stem, model.stem.split("-", 1)[0])
            for model in sorted(self._models_dir.glob("*.onnx"))
        ]

    def _load_voice(self) -> None:
        """Load the current voice model, leaving the engine unavailable on failure."""
        self._piper = None
        if not PIPER_AVAILABLE:
            logger.warning("piper-tts not available. Install with: pip install piper-tts")
            return
        if not self._voice:
            logger.warning("No Piper voice found in %s", self._models_dir)
            return

        model_path = self._models_dir / f"{self._voice}.onnx"
        config_path = self._models_dir / f"{self._voice}.onnx.json"
        if not model_path.exists():
            logger.warning("Piper model not found: %s", model_path)
            return

        try:
            self._piper = piper.PiperVoice.load(str(model_path), str(config_path))
            logger.info("Piper initialized with voice: %s", self._voice)
        except Exception as e:
            logger.error("Failed to load Piper voice: %s", e)

    def synthesize(self, text: str) -> SynthesisResult:
        """Synthesize text to speech.

        Raises:
            RuntimeError: If no voice is loaded
        """
        if self._piper is None:
            raise RuntimeError("Piper voice not loaded")

        start_time = time.time()
        sample_rate = self._piper.config.sample_rate
        audio_data = b"".join(chunk.audio_int16_bytes for chunk in self._piper.synthesize(text))

        if self._speed != 1.0:
            audio_data = self._adjust_speed(audio_data)

        duration_ms = int(len(audio_data) / (sample_rate * 2) * 1000)
        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug("Synthesized '%s...' in %dms (%dms audio)", text[:30], latency_ms, duration_ms)

        return SynthesisResult(
            audio=audio_data,
            sample_rate=sample_rate,
            duration_ms=duration_ms,
            latency_ms=latency_ms,
        )

    def _adjust_speed(self, audio: bytes) -> bytes:
        """Resample to change playback speed."""
        audio_array = np.frombuffer(audio, dtype=np.int16)
        new_length = int(len(audio_array) / self._speed)
        indices = np.linspace(0, len(audio_array) - 1, new_length).astype(int)
        return audio_array[indices].tobytes()

    def set_voice(self, voice_id: str) -> None:
        """Set voice and reload model."""
        self._voice = voice_id
        self._load_voice()

    def set_speed(self, speed: float) -> None:
        """Set speech speed."""
        self._speed = max(0.5, min(2.0, speed))

    def get_available_voices(self) -> list[str]:
        """Return installed voice model names."""
        return [name for name, _ in self._installed_voices()]

    @property
    def voice(self) -> str | None:
        """Get current voice."""
        return self._voice

    @property
    def is_available(self) -> bool:
        """Check if a Piper voice is loaded."""
        return self._piper is not None


__all__ = ["PIPER_AVAILABLE", "PiperSynthesizer"]
