"""Recognition engine protocol and data classes.

Defines the interface that every speech recognition binding must follow.
Engines deliver their callbacks on the event loop thread; engines that
capture audio in a worker thread hand events over with
``loop.call_soon_threadsafe``.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class RecognitionMode(Enum):
    """Recognition session configurations."""

    AMBIENT = "ambient"  # Continuous, interim results, wake phrase only
    COMMAND = "command"  # Single utterance, final results only


class RecognitionError(Exception):
    """Base exception for recognition engine errors."""

    pass


class RecognitionBusyError(RecognitionError):
    """Raised when an engine is started before a prior run released the microphone."""

    pass


@dataclass(frozen=True)
class RecognitionSettings:
    """Engine settings for one recognition run.

    Attributes:
        continuous: Keep listening after the first final result
        interim_results: Deliver non-final hypotheses while speech is ongoing
        language: BCP-47 language tag (e.g., "pt-BR")
    """

    continuous: bool
    interim_results: bool
    language: str

    @classmethod
    def for_mode(cls, mode: RecognitionMode, language: str) -> "RecognitionSettings":
        """Build the settings used by a session mode."""
        if mode == RecognitionMode.AMBIENT:
            return cls(continuous=True, interim_results=True, language=language)
        return cls(continuous=False, interim_results=False, language=language)


@dataclass
class RecognitionResult:
    """One recognition result with its ranked alternatives.

    Attributes:
        alternatives: Candidate transcripts, best first
        is_final: True once the engine will not revise this result
    """

    alternatives: list[str] = field(default_factory=list)
    is_final: bool = False


ResultsCallback = Callable[[Sequence[RecognitionResult] | None], None]
EndCallback = Callable[[], None]
ErrorCallback = Callable[[str], None]


class RecognitionEngine(Protocol):
    """Interface for a platform speech recognition binding.

    One engine instance serves one recognition run. ``on_results`` receives
    every result of the run so far, in order.
    """

    def bind(
        self,
        on_results: ResultsCallback,
        on_end: EndCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Attach event callbacks before starting."""
        ...

    def start(self, settings: RecognitionSettings) -> None:
        """Start recognizing.

        Raises:
            RecognitionBusyError: If a prior run has not released the microphone
            RecognitionError: If the engine cannot start
        """
        ...

    def stop(self) -> None:
        """Request the run to stop. Safe to call when not running."""
        ...


EngineFactory = Callable[[RecognitionMode], RecognitionEngine]


__all__ = [
    "EndCallback",
    "EngineFactory",
    "ErrorCallback",
    "RecognitionBusyError",
    "RecognitionEngine",
    "RecognitionError",
    "RecognitionMode",
    "RecognitionResult",
    "RecognitionSettings",
    "ResultsCallback",
]
