"""Intent data model.

An intent is the structured reading of one command transcript.
"""

from dataclasses import dataclass
from enum import Enum

from ..reminders.models import ReminderKind


class IntentAction(Enum):
    """What the assistant should do with a command."""

    ADD_REMINDER = "add_reminder"
    CHAT = "chat"
    INITIATE_FOLLOW_TOPIC = "read_news_init"


@dataclass(frozen=True)
class Intent:
    """Classified command.

    Attributes:
        action: The action to perform
        text: Reminder text or news topic, when the command carried one
        reminder_kind: Kind of reminder for ADD_REMINDER
        spoken_response: What to say back (may be empty for ADD_REMINDER)
    """

    action: IntentAction
    text: str | None = None
    reminder_kind: ReminderKind | None = None
    spoken_response: str = ""

    @property
    def arms_follow_up(self) -> bool:
        """True for a topic request that still needs the topic."""
        return self.action is IntentAction.INITIATE_FOLLOW_TOPIC and not self.text

    @classmethod
    def apology(cls, message: str) -> "Intent":
        """Fallback intent used when classification fails."""
        return cls(action=IntentAction.CHAT, spoken_response=message)


__all__ = ["Intent", "IntentAction"]
