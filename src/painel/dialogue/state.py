"""Dialogue states and controller messages."""

from dataclasses import dataclass
from enum import Enum

from ..recognition.session import RecognitionEnded, RecognitionFailed, UtteranceReceived
from ..tts.channel import SpeechDone


class DialogueState(Enum):
    """Controller state. Exactly one is active at a time."""

    AMBIENT = "ambient"
    ACKNOWLEDGING = "acknowledging"
    CAPTURING_COMMAND = "capturing_command"
    CLASSIFYING = "classifying"
    EXECUTING = "executing"
    AWAITING_FOLLOW_UP = "awaiting_follow_up"
    RECOVERING = "recovering"


# States in which the controller owns a recognition session
LISTENING_STATES = frozenset(
    {
        DialogueState.AMBIENT,
        DialogueState.CAPTURING_COMMAND,
        DialogueState.AWAITING_FOLLOW_UP,
    }
)


@dataclass
class FollowUpContext:
    """Pending topic request.

    While pending, the next final command utterance is the topic itself.
    """

    pending: bool = False

    def arm(self) -> None:
        self.pending = True

    def clear(self) -> None:
        self.pending = False


@dataclass(frozen=True)
class RetryStart:
    """Retry starting a session the engine refused."""

    session_id: int


@dataclass(frozen=True)
class ResumeAmbient:
    """Re-arm ambient listening after it ended or failed.

    Only honored if no transition happened since it was scheduled.
    """

    epoch: int


ControllerMessage = (
    UtteranceReceived | RecognitionEnded | RecognitionFailed | SpeechDone | RetryStart | ResumeAmbient
)


__all__ = [
    "LISTENING_STATES",
    "ControllerMessage",
    "DialogueState",
    "FollowUpContext",
    "ResumeAmbient",
    "RetryStart",
]
