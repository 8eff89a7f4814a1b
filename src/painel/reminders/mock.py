"""In-memory reminder store for tests and the test profile."""

import itertools
import logging

from .errors import ReminderStoreError
from .models import Reminder, ReminderKind

logger = logging.getLogger(__name__)


class InMemoryReminderStore:
    """Keeps reminders in a list. Failures can be scheduled."""

    def __init__(self) -> None:
        self._reminders: list[Reminder] = []
        self._ids = itertools.count(1)
        self._fail_next = 0

    def fail_next(self, count: int = 1) -> None:
        """Make the next `count` commits raise ReminderStoreError."""
        self._fail_next = count

    def commit(self, text: str, kind: ReminderKind) -> str:
        if self._fail_next > 0:
            self._fail_next -= 1
            raise ReminderStoreError("Simulated store failure")
        if not text or not text.strip():
            raise ReminderStoreError("Reminder text is empty")

        reminder = Reminder.create(text, kind)
        reminder.id = f"mem-{next(self._ids)}"
        self._reminders.append(reminder)
        logger.debug("Stored reminder %s: %s", reminder.id, reminder.text)
        return reminder.id

    def list_recent(self, limit: int = 20) -> list[Reminder]:
        return list(reversed(self._reminders))[:limit]

    def delete(self, reminder_id: str) -> bool:
        for i, reminder in enumerate(self._reminders):
            if reminder.id == reminder_id:
                del self._reminders[i]
                return True
        return False

    @property
    def reminders(self) -> list[Reminder]:
        """Stored reminders in commit order."""
        return self._reminders.copy()


__all__ = ["InMemoryReminderStore"]
