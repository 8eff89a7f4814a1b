"""Data models for reminders.

A reminder is what the voice assistant adds to the dashboard's reminder
widget: a short text, a kind that drives its color, and the local time
it was created.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ReminderKind(Enum):
    """Kind of reminder. Values are the stored wire values."""

    INFO = "info"
    ALERT = "alert"
    TASK = "action"

    @classmethod
    def from_wire(cls, value: str | None) -> "ReminderKind":
        """Parse a stored or classifier-provided kind, defaulting to INFO."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.INFO


@dataclass
class Reminder:
    """A reminder document."""

    text: str
    kind: ReminderKind = ReminderKind.INFO
    time: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str | None = None

    @classmethod
    def create(
        cls,
        text: str,
        kind: ReminderKind = ReminderKind.INFO,
        now: datetime | None = None,
    ) -> "Reminder":
        """Build a new reminder stamped with the local "HH:MM" time."""
        created_at = now or datetime.now(UTC)
        return cls(
            text=text.strip(),
            kind=kind,
            time=created_at.astimezone().strftime("%H:%M"),
            created_at=created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "text": self.text,
            "type": self.kind.value,
            "time": self.time,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        """Create from a MongoDB document."""
        return cls(
            text=data.get("text", ""),
            kind=ReminderKind.from_wire(data.get("type")),
            time=data.get("time", ""),
            created_at=data.get("created_at") or datetime.now(UTC),
            id=str(data["_id"]) if "_id" in data else None,
        )


__all__ = ["Reminder", "ReminderKind"]
