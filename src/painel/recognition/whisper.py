"""Microphone recognition engine using PyAudio and faster-whisper.

Audio is captured in a worker thread, segmented with a simple energy
detector and transcribed with faster-whisper. Results are handed to the
event loop with ``call_soon_threadsafe``.
"""

import asyncio
import functools
import logging
import threading
import time
from typing import Any

import numpy as np

from ..config import RecognitionConfig
from .engine import (
    EndCallback,
    ErrorCallback,
    RecognitionBusyError,
    RecognitionError,
    RecognitionResult,
    RecognitionSettings,
    ResultsCallback,
)

# faster-whisper import with fallback
try:
    from faster_whisper import WhisperModel

    FASTER_WHISPER_AVAILABLE = True
except ImportError:
    FASTER_WHISPER_AVAILABLE = False
    WhisperModel = None  # type: ignore

# PyAudio import with fallback
try:
    import pyaudio

    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    pyaudio = None

logger = logging.getLogger(__name__)

WHISPER_SAMPLE_RATE = 16000
INTERIM_INTERVAL_MS = 1000
# Final results kept for a continuous run; the wake window only reads the tail
RESULT_HISTORY = 4

# One capture at a time; held from start until the worker thread exits
_microphone_lock = threading.Lock()


@functools.lru_cache(maxsize=2)
def _load_model(model_size: str, device: str, compute_type: str) -> Any:
    """Load and cache a Whisper model shared by every engine instance."""
    logger.info(
        "Loading Whisper model: %s (device=%s, compute=%s)", model_size, device, compute_type
    )
    start = time.time()
    model = WhisperModel(model_size, device=device, compute_type=compute_type)
    logger.info("Whisper model loaded in %.0fms", (time.time() - start) * 1000)
    return model


def is_available() -> bool:
    """Return True if both faster-whisper and PyAudio are installed."""
    return FASTER_WHISPER_AVAILABLE and PYAUDIO_AVAILABLE


class WhisperRecognitionEngine:
    """Recognition engine backed by the default microphone.

    Starting while a previous run still holds the microphone raises
    RecognitionBusyError. Callers are expected to retry.
    """

    def __init__(self, config: RecognitionConfig | None = None) -> None:
        """Initialize the engine.

        Args:
            config: Recognition configuration

        Raises:
            RuntimeError: If faster-whisper or PyAudio is not available
        """
        if not is_available():
            raise RuntimeError(
                "Microphone recognition requires faster-whisper and pyaudio. "
                "Install with: pip install 'painel[voice]'"
            )

        self._config = config or RecognitionConfig()
        self._on_results: ResultsCallback | None = None
        self._on_end: EndCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def bind(
        self,
        on_results: ResultsCallback,
        on_end: EndCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Attach event callbacks."""
        self._on_results = on_results
        self._on_end = on_end
        self._on_error = on_error

    def start(self, settings: RecognitionSettings) -> None:
        """Start capturing in a worker thread.

        Raises:
            RecognitionBusyError: If the microphone is still held
            RecognitionError: If called outside a running event loop
        """
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise RecognitionError("engine must be started from the event loop") from e

        if not _microphone_lock.acquire(blocking=False):
            raise RecognitionBusyError("microphone still held by a previous recognition run")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(settings,),
            name="whisper-recognition",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Ask the worker to finish. Does not wait for it."""
        self._stop_event.set()

    def _run(self, settings: RecognitionSettings) -> None:
        """Worker loop: capture, segment, transcribe, report."""
        error_reason: str | None = None
        pa: Any = None
        stream: Any = None

        try:
            model = _load_model(
                self._config.model, self._config.device, self._config.compute_type
            )
            pa = pyaudio.PyAudio()
            stream = pa.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=self._config.sample_rate,
                input=True,
                frames_per_buffer=self._config.chunk_size,
            )
            error_reason = self._capture_loop(stream, model, settings)
        except Exception as e:
            logger.error("Recognition worker failed: %s", e)
            error_reason = f"audio-capture: {e}"
        finally:
            try:
                if stream is not None:
                    stream.stop_stream()
                    stream.close()
                if pa is not None:
                    pa.terminate()
            except Exception as e:
                logger.warning("Failed to release audio device: %s", e)
            finally:
                _microphone_lock.release()

        if error_reason is not None:
            self._post(self._on_error, error_reason)
        else:
            self._post(self._on_end)

    def _capture_loop(self, stream: Any, model: Any, settings: RecognitionSettings) -> str | None:
        """Read audio until stopped.

        Returns:
            An error reason, or None for a normal end
        """
        chunk_ms = self._config.chunk_size / self._config.sample_rate * 1000
        results: list[RecognitionResult] = []
        buffer: list[bytes] = []
        in_speech = False
        silence_ms = 0.0
        speech_ms = 0.0
        idle_ms = 0.0
        since_interim_ms = 0.0

        while not self._stop_event.is_set():
            data = stream.read(self._config.chunk_size, exception_on_overflow=False)
            samples = np.frombuffer(data, dtype=np.int16).astype(np.float32)
            rms = float(np.sqrt(np.mean(samples**2))) if samples.size else 0.0
            loud = rms >= self._config.energy_threshold

            if not in_speech:
                if not loud:
                    idle_ms += chunk_ms
                    if not settings.continuous and idle_ms >= self._config.no_speech_timeout_ms:
                        return "no-speech"
                    continue
                in_speech = True
                buffer, silence_ms, speech_ms, since_interim_ms = [], 0.0, 0.0, 0.0

            buffer.append(data)
            speech_ms += chunk_ms
            since_interim_ms += chunk_ms
            silence_ms = 0.0 if loud else silence_ms + chunk_ms

            segment_done = (
                silence_ms >= self._config.silence_timeout_ms
                or speech_ms >= self._config.max_utterance_ms
            )

            if not segment_done:
                if settings.interim_results and since_interim_ms >= INTERIM_INTERVAL_MS:
                    since_interim_ms = 0.0
                    text = self._transcribe(model, b"".join(buffer), settings.language)
                    if text:
                        interim = RecognitionResult(alternatives=[text], is_final=False)
                        self._post(self._on_results, [*results, interim])
                continue

            in_speech = False
            idle_ms = 0.0
            text = self._transcribe(model, b"".join(buffer), settings.language)
            if not text:
                continue

            results.append(RecognitionResult(alternatives=[text], is_final=True))
            del results[:-RESULT_HISTORY]
            self._post(self._on_results, list(results))
            if not settings.continuous:
                return None

        return None

    def _transcribe(self, model: Any, audio: bytes, language: str) -> str:
        """Transcribe a 16-bit mono PCM buffer."""
        audio_array = np.frombuffer(audio, dtype=np.int16).astype(np.float32) / 32768.0

        if self._config.sample_rate != WHISPER_SAMPLE_RATE:
            ratio = WHISPER_SAMPLE_RATE / self._config.sample_rate
            new_length = int(len(audio_array) * ratio)
            indices = np.linspace(0, len(audio_array) - 1, new_length).astype(int)
            audio_array = audio_array[indices]

        segments, _info = model.transcribe(
            audio_array,
            language=language.split("-")[0].lower() or None,
            beam_size=1,
            vad_filter=True,
        )
        return " ".join(segment.text.strip() for segment in segments).strip()

    def _post(self, callback: Any, *args: Any) -> None:
        if callback is None or self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(callback, *args)


__all__ = [
    "FASTER_WHISPER_AVAILABLE",
    "PYAUDIO_AVAILABLE",
    "RESULT_HISTORY",
    "WhisperRecognitionEngine",
    "is_available",
]
