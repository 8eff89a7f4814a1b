"""Unit tests for the microphone recognition engine without audio hardware."""

from types import SimpleNamespace
from unittest import mock

import numpy as np
import pytest

from painel.config import RecognitionConfig
from painel.recognition import RecognitionMode, RecognitionSettings
from painel.recognition.whisper import RESULT_HISTORY, WhisperRecognitionEngine, _microphone_lock

LOUD = np.full(1024, 10000, dtype=np.int16).tobytes()
SILENT = np.zeros(1024, dtype=np.int16).tobytes()


class AlternatingStream:
    """Yields one loud and one silent chunk per segment, then stops the engine."""

    def __init__(self, engine: WhisperRecognitionEngine, segments: int) -> None:
        self._engine = engine
        self._segments = segments
        self.reads = 0

    def read(self, size: int, exception_on_overflow: bool = True) -> bytes:
        self.reads += 1
        if self.reads >= 2 * self._segments:
            self._engine.stop()
        return LOUD if self.reads % 2 else SILENT


class CountingModel:
    """Transcribes every segment as a numbered, punctuated sentence."""

    def __init__(self) -> None:
        self.calls = 0

    def transcribe(self, audio: np.ndarray, **kwargs: object) -> tuple[list, None]:
        self.calls += 1
        return [SimpleNamespace(text=f" Frase {self.calls}.")], None


@pytest.fixture
def engine() -> WhisperRecognitionEngine:
    config = RecognitionConfig(silence_timeout_ms=60, chunk_size=1024, sample_rate=16000)
    with mock.patch("painel.recognition.whisper.is_available", return_value=True):
        return WhisperRecognitionEngine(config)


class TestCaptureLoop:
    """Tests for segmenting and reporting results."""

    def test_continuous_run_keeps_bounded_history(self, engine: WhisperRecognitionEngine) -> None:
        posted: list = []
        engine._post = lambda callback, *args: posted.append(args)  # type: ignore[method-assign]
        settings = RecognitionSettings.for_mode(RecognitionMode.AMBIENT, "pt-BR")

        reason = engine._capture_loop(AlternatingStream(engine, 20), CountingModel(), settings)

        assert reason is None
        assert len(posted) == 20
        assert all(len(results) <= RESULT_HISTORY for (results,) in posted)
        last = posted[-1][0]
        assert [r.alternatives[0] for r in last] == [
            f"Frase {i}." for i in range(21 - RESULT_HISTORY, 21)
        ]

    def test_command_run_stops_after_first_final(self, engine: WhisperRecognitionEngine) -> None:
        posted: list = []
        engine._post = lambda callback, *args: posted.append(args)  # type: ignore[method-assign]
        settings = RecognitionSettings.for_mode(RecognitionMode.COMMAND, "pt-BR")
        stream = AlternatingStream(engine, 5)

        reason = engine._capture_loop(stream, CountingModel(), settings)

        assert reason is None
        assert stream.reads == 2
        [(results,)] = posted
        assert results[0].alternatives == ["Frase 1."]
        assert results[0].is_final is True


class TestWorkerCleanup:
    """Tests for releasing the microphone when the worker exits."""

    def test_lock_released_when_device_close_fails(
        self, engine: WhisperRecognitionEngine
    ) -> None:
        pa = mock.MagicMock()
        stream = pa.open.return_value
        stream.read.side_effect = OSError("input overflowed")
        stream.stop_stream.side_effect = OSError("device gone")
        fake_pyaudio = mock.MagicMock()
        fake_pyaudio.PyAudio.return_value = pa
        settings = RecognitionSettings.for_mode(RecognitionMode.COMMAND, "pt-BR")

        assert _microphone_lock.acquire(blocking=False)
        with mock.patch(
            "painel.recognition.whisper._load_model", return_value=CountingModel()
        ), mock.patch("painel.recognition.whisper.pyaudio", fake_pyaudio):
            engine._run(settings)

        assert not _microphone_lock.locked()
