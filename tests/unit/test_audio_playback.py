"""Unit tests for audio playback selection and the mock backend."""

from unittest.mock import patch

from painel.audio import MockAudioPlayback, create_audio_playback
from painel.config import AudioConfig


class TestMockAudioPlayback:
    """Tests for MockAudioPlayback."""

    def test_records_playback(self) -> None:
        playback = MockAudioPlayback()
        playback.play(b"\x00\x00" * 10, 22050)
        playback.stop()

        assert playback.play_count == 1
        assert playback.stop_count == 1
        assert playback.is_playing is False

    def test_clear(self) -> None:
        playback = MockAudioPlayback()
        playback.play(b"", 16000)
        playback.clear()
        assert playback.play_count == 0


class TestCreateAudioPlayback:
    """Tests for create_audio_playback()."""

    def test_mock_requested(self) -> None:
        assert isinstance(create_audio_playback(use_mock=True), MockAudioPlayback)

    def test_falls_back_without_pyaudio(self) -> None:
        with patch("painel.audio.pyaudio_backend.PYAUDIO_AVAILABLE", False):
            playback = create_audio_playback(AudioConfig())
        assert isinstance(playback, MockAudioPlayback)

    def test_uses_pyaudio_when_available(self) -> None:
        with patch("painel.audio.pyaudio_backend.PYAUDIO_AVAILABLE", True):
            playback = create_audio_playback(AudioConfig(output_device="USB"))
        assert type(playback).__name__ == "PyAudioPlayback"
