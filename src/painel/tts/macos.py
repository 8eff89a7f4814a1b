"""macOS TTS synthesizer using native `say` command.

Provides speech synthesis using macOS's built-in voices, selecting a
voice that matches the configured locale.
"""

import logging
import shutil
import subprocess
import tempfile
import time
import wave
from pathlib import Path

from .synthesizer import SynthesisResult, choose_voice

logger = logging.getLogger(__name__)

DEFAULT_WORDS_PER_MINUTE = 175


class MacOSSynthesizer:
    """Text-to-speech synthesizer using macOS native `say` command."""

    TARGET_SAMPLE_RATE = 22050

    def __init__(
        self,
        voice: str | None = None,
        locale: str = "pt-BR",
        speed: float = 1.0,
    ) -> None:
        """Initialize macOS synthesizer.

        Args:
            voice: Voice name. If None, the first voice matching locale is used
            locale: Locale used to choose a voice
            speed: Speech speed multiplier (default: 1.0)
        """
        self._say_path = shutil.which("say")
        self._speed = max(0.5, min(2.0, speed))
        self._voice = voice
        if self.is_available:
            self._voice = choose_voice(self.list_voices(), locale, preferred=voice) or voice
        logger.debug("macOS TTS voice: %s", self._voice or "system default")

    @property
    def is_available(self) -> bool:
        """Return True if the `say` command is available."""
        return self._say_path is not None

    @property
    def voice(self) -> str | None:
        """Get current voice."""
        return self._voice

    def synthesize(self, text: str) -> SynthesisResult:
        """Convert text to speech audio.

        Raises:
            RuntimeError: If synthesis fails
        """
        start_time = time.time()

        if not self.is_available:
            raise RuntimeError("macOS TTS not available: say command not found")

        with tempfile.TemporaryDirectory() as tmpdir:
            aiff_path = Path(tmpdir) / "speech.aiff"
            wav_path = Path(tmpdir) / "speech.wav"
            try:
                self._run_say_command(text, aiff_path)
                audio_data, sample_rate = self._convert_aiff_to_pcm(aiff_path, wav_path)
            except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
                raise RuntimeError(f"macOS TTS synthesis failed: {e}") from e

        duration_ms = int(len(audio_data) / (sample_rate * 2) * 1000)
        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug("Synthesized '%s...' in %dms (%dms audio)", text[:30], latency_ms, duration_ms)

        return SynthesisResult(
            audio=audio_data,
            sample_rate=sample_rate,
            duration_ms=max(1, duration_ms),
            latency_ms=latency_ms,
        )

    def _run_say_command(self, text: str, output_path: Path) -> None:
        """Run the macOS say command to generate AIFF audio."""
        cmd = ["say", "-r", str(int(DEFAULT_WORDS_PER_MINUTE * self._speed))]
        if self._voice:
            cmd += ["-v", self._voice]
        cmd += ["-o", str(output_path), text or " "]
        subprocess.run(cmd, check=True, capture_output=True, timeout=30)

    def _convert_aiff_to_pcm(self, aiff_path: Path, wav_path: Path) -> tuple[bytes, int]:
        """Convert AIFF to 16-bit little-endian PCM with afconvert."""
        subprocess.run(
            [
                "afconvert",
                "-f",
                "WAVE",
                "-d",
                "LEI16",
                "-r",
                str(self.TARGET_SAMPLE_RATE),
                str(aiff_path),
                str(wav_path),
            ],
            check=True,
            capture_output=True,
            timeout=30,
        )

        with wave.open(str(wav_path), "rb") as wav_file:
            return wav_file.readframes(wav_file.getnframes()), wav_file.getframerate()

    def set_voice(self, voice_id: str) -> None:
        """Set the voice for synthesis."""
        self._voice = voice_id

    def set_speed(self, speed: float) -> None:
        """Set speech speed multiplier (0.5 to 2.0)."""
        self._speed = max(0.5, min(2.0, speed))

    def list_voices(self) -> list[tuple[str, str]]:
        """List installed voices with their locales.

        Returns:
            (voice_name, locale) pairs, e.g. ("Luciana", "pt_BR")
        """
        if not self.is_available:
            return []

        try:
            result = subprocess.run(
                ["say", "-v", "?"],
                check=True,
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            logger.warning("Failed to list macOS voices: %s", e)
            return []

        voices = []
        for line in result.stdout.splitlines():
            # Format: "Luciana             pt_BR    # Olá, meu nome é Luciana."
            description = line.split("#", 1)[0].split()
            if len(description) >= 2:
                voices.append((" ".join(description[:-1]), description[-1]))
        return voices

    def get_available_voices(self) -> list[str]:
        """List available macOS voice names."""
        return [name for name, _ in self.list_voices()]


__all__ = ["MacOSSynthesizer"]
