"""Dialogue cycle records for the interaction log.

One record covers one wake-to-resolution cycle: what was heard, how it
was classified, what was said back and how long each step took.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID


class CycleOutcome(Enum):
    """How a dialogue cycle ended."""

    COMPLETED = "completed"
    FOLLOW_UP = "follow_up"
    RECOGNITION_FAILED = "recognition_failed"
    CLASSIFIER_FAILED = "classifier_failed"
    CONTENT_FAILED = "content_failed"
    REMINDER_FAILED = "reminder_failed"


@dataclass
class DialogueCycle:
    """A single command cycle.

    Attributes:
        id: Unique cycle identifier.
        timestamp: UTC time the wake phrase was heard.
        transcript: Final command transcript, if one was captured.
        intent: Intent action name, if classified or synthesized.
        intent_text: Reminder text or topic carried by the intent.
        response: Text spoken back.
        outcome: How the cycle ended.
        follow_up: True if the command answered a follow-up question.
        latency_ms: Step latencies (classify, execute, total).
        error: Error message if the cycle failed.
    """

    id: UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    transcript: str | None = None
    intent: str | None = None
    intent_text: str | None = None
    response: str | None = None
    outcome: CycleOutcome = CycleOutcome.COMPLETED
    follow_up: bool = False
    latency_ms: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert cycle to dictionary for serialization."""
        return {
            "id": str(self.id),
            "timestamp": self.timestamp.isoformat(),
            "transcript": self.transcript,
            "intent": self.intent,
            "intent_text": self.intent_text,
            "response": self.response,
            "outcome": self.outcome.value,
            "follow_up": self.follow_up,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DialogueCycle":
        """Create cycle from dictionary."""
        return cls(
            id=UUID(data["id"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            transcript=data.get("transcript"),
            intent=data.get("intent"),
            intent_text=data.get("intent_text"),
            response=data.get("response"),
            outcome=CycleOutcome(data["outcome"]),
            follow_up=data.get("follow_up", False),
            latency_ms=data.get("latency_ms", {}),
            error=data.get("error"),
        )


__all__ = ["CycleOutcome", "DialogueCycle"]
