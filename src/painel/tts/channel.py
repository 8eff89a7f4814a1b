"""Synthesis channel: speak one utterance at a time.

Every speak() supersedes the utterance in progress and reports completion
through a SpeechDone message carrying the token speak() returned.
"""

import asyncio
import functools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..audio.playback import AudioPlayback
from .synthesizer import Synthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechDone:
    """An utterance finished, failed, or was superseded."""

    token: int
    cancelled: bool = False


DoneCallback = Callable[[SpeechDone], None]


class SpeechChannel(Protocol):
    """Interface the dialogue controller speaks through."""

    def set_done_callback(self, callback: DoneCallback) -> None:
        """Register the receiver of SpeechDone messages."""
        ...

    def speak(self, text: str, rate: float = 1.0) -> int:
        """Cancel current speech, start speaking text, return its token."""
        ...

    def cancel(self) -> None:
        """Stop the current utterance, if any."""
        ...

    @property
    def is_speaking(self) -> bool:
        """Return True while an utterance is in progress."""
        ...


class SynthesisChannel:
    """Speaks through a Synthesizer and AudioPlayback off the event loop.

    Synthesis and playback run in a worker thread via asyncio.to_thread.
    The done callback is invoked on the loop exactly once per speak() call.
    """

    def __init__(
        self,
        synthesizer: Synthesizer,
        playback: AudioPlayback,
    ) -> None:
        self._synthesizer = synthesizer
        self._playback = playback
        self._on_done: DoneCallback | None = None
        self._next_token = 0
        self._task: asyncio.Task[None] | None = None
        self._abort: threading.Event | None = None
        # Serializes device access between a superseded worker and its successor
        self._device_lock = threading.Lock()

    def set_done_callback(self, callback: DoneCallback) -> None:
        self._on_done = callback

    def speak(self, text: str, rate: float = 1.0) -> int:
        """Start speaking text at rate.

        Must be called from within the running event loop.
        """
        self.cancel()
        self._next_token += 1
        token = self._next_token
        abort = threading.Event()
        self._abort = abort
        self._task = asyncio.get_running_loop().create_task(self._play(text, rate, abort))
        self._task.add_done_callback(functools.partial(self._finished, token, abort))
        return token

    def cancel(self) -> None:
        if self._task is None or self._task.done():
            return
        if self._abort is not None:
            self._abort.set()
        self._playback.stop()
        self._task.cancel()

    @property
    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _play(self, text: str, rate: float, abort: threading.Event) -> None:
        try:
            await asyncio.to_thread(self._render, text, rate, abort)
        except Exception as e:
            logger.warning("Speech synthesis failed: %s", e)

    def _finished(self, token: int, abort: threading.Event, task: asyncio.Task[None]) -> None:
        cancelled = task.cancelled() or abort.is_set()
        logger.debug("Speech %d done (cancelled=%s)", token, cancelled)
        if self._on_done is not None:
            self._on_done(SpeechDone(token=token, cancelled=cancelled))

    def _render(self, text: str, rate: float, abort: threading.Event) -> None:
        with self._device_lock:
            if abort.is_set():
                return
            self._synthesizer.set_speed(rate)
            result = self._synthesizer.synthesize(text)
            if abort.is_set():
                return
            self._playback.play(result.audio, result.sample_rate)


__all__ = ["DoneCallback", "SpeechChannel", "SpeechDone", "SynthesisChannel"]
