"""Recognition session wrapper.

A session owns one engine run and turns raw engine callbacks into
messages tagged with the session id. The dialogue controller compares that
id with its current handle, so events from a stopped session are
recognized as stale.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .engine import (
    RecognitionEngine,
    RecognitionError,
    RecognitionMode,
    RecognitionResult,
    RecognitionSettings,
)

logger = logging.getLogger(__name__)

# Ambient results joined per utterance; older ones cannot reach the wake window
AMBIENT_RESULT_LIMIT = 8


@dataclass(frozen=True)
class Utterance:
    """Transcript produced by a recognition session.

    Attributes:
        text: Transcript text
        is_final: True if the engine will not revise it
    """

    text: str
    is_final: bool


@dataclass(frozen=True)
class UtteranceReceived:
    """A session produced a partial or final utterance."""

    session_id: int
    utterance: Utterance


@dataclass(frozen=True)
class RecognitionEnded:
    """A session run ended normally."""

    session_id: int


@dataclass(frozen=True)
class RecognitionFailed:
    """A session run ended with an engine error."""

    session_id: int
    reason: str


RecognitionEvent = UtteranceReceived | RecognitionEnded | RecognitionFailed


def _top_transcript(result: object) -> str | None:
    """Return the best alternative of a result, or None if it is malformed."""
    alternatives = getattr(result, "alternatives", None)
    if not alternatives:
        return None
    text = alternatives[0]
    if not isinstance(text, str):
        return None
    return text


class RecognitionSession:
    """One recognition run in ambient or command mode.

    Emits exactly one terminal event (``RecognitionEnded`` or
    ``RecognitionFailed``) per run. Malformed result sets are ignored.
    """

    def __init__(
        self,
        session_id: int,
        mode: RecognitionMode,
        engine: RecognitionEngine,
        sink: Callable[[RecognitionEvent], None],
        language: str = "pt-BR",
    ) -> None:
        """Initialize the session.

        Args:
            session_id: Identity used to discard stale events
            mode: Ambient or command configuration
            engine: Fresh engine instance for this run
            sink: Receives the session's events
            language: Recognition language tag
        """
        self._session_id = session_id
        self._mode = mode
        self._engine = engine
        self._sink = sink
        self._language = language
        self._active = False
        self._terminated = False

    @property
    def session_id(self) -> int:
        """Get the session id."""
        return self._session_id

    @property
    def mode(self) -> RecognitionMode:
        """Get the session mode."""
        return self._mode

    @property
    def is_active(self) -> bool:
        """Return True between a successful start and stop or termination."""
        return self._active

    def start(self) -> bool:
        """Start the engine run.

        Returns:
            True if the engine started. False if it refused, typically because
            a previous run has not released the microphone yet. The failure
            is logged and the caller decides whether to retry.
        """
        if self._active:
            return True

        settings = RecognitionSettings.for_mode(self._mode, self._language)
        self._engine.bind(self._on_results, self._on_end, self._on_error)
        try:
            self._engine.start(settings)
        except RecognitionError as e:
            logger.warning(
                "Recognition session %d (%s) failed to start: %s",
                self._session_id,
                self._mode.value,
                e,
            )
            return False

        self._active = True
        self._terminated = False
        logger.debug("Recognition session %d started (%s)", self._session_id, self._mode.value)
        return True

    def stop(self) -> None:
        """Stop the run. Calling stop on a stopped session is a no-op."""
        if not self._active:
            return

        self._active = False
        try:
            self._engine.stop()
        except RecognitionError as e:
            logger.debug("Engine stop for session %d raised: %s", self._session_id, e)
        logger.debug("Recognition session %d stopped", self._session_id)

    def _on_results(self, results: Sequence[RecognitionResult] | None) -> None:
        if self._terminated:
            return

        utterance = self._build_utterance(results)
        if utterance is None:
            logger.debug("Session %d: ignoring empty or malformed result set", self._session_id)
            return

        self._sink(UtteranceReceived(self._session_id, utterance))

    def _on_end(self) -> None:
        self._terminate(RecognitionEnded(self._session_id))

    def _on_error(self, reason: str) -> None:
        self._terminate(RecognitionFailed(self._session_id, reason or "unknown"))

    def _terminate(self, event: RecognitionEnded | RecognitionFailed) -> None:
        if self._terminated:
            logger.debug("Session %d: dropping second terminal event %r", self._session_id, event)
            return
        self._terminated = True
        self._active = False
        self._sink(event)

    def _build_utterance(self, results: Sequence[RecognitionResult] | None) -> Utterance | None:
        """Convert engine results to an utterance.

        Ambient runs concatenate the best alternative of the most recent
        results so the wake phrase can be found across result boundaries.
        Command runs use only the latest result.
        """
        if not results:
            return None

        try:
            last = results[-1]
            recent = results[-AMBIENT_RESULT_LIMIT:]
        except (TypeError, IndexError):
            return None

        if self._mode == RecognitionMode.AMBIENT:
            parts = [_top_transcript(result) for result in recent]
            text = " ".join(part.strip() for part in parts if part and part.strip())
        else:
            text = (_top_transcript(last) or "").strip()

        if not text:
            return None

        return Utterance(text=text, is_final=bool(getattr(last, "is_final", False)))


__all__ = [
    "AMBIENT_RESULT_LIMIT",
    "RecognitionEnded",
    "RecognitionEvent",
    "RecognitionFailed",
    "RecognitionSession",
    "Utterance",
    "UtteranceReceived",
]
