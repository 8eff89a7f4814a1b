"""Reminder persistence for the Painel voice assistant.

Usage:
    store = create_reminder_store(config.reminders)
    reminder_id = store.commit("comprar pão", ReminderKind.TASK)
"""

import logging
from typing import TYPE_CHECKING

from .errors import ReminderStoreError
from .mock import InMemoryReminderStore
from .models import Reminder, ReminderKind
from .store import MongoReminderStore, ReminderStore, retry_on_connection_failure

if TYPE_CHECKING:
    from ..config import ReminderConfig

logger = logging.getLogger(__name__)


def create_reminder_store(
    config: "ReminderConfig | None" = None,
    use_mock: bool = False,
) -> ReminderStore:
    """Create the reminder store selected by configuration.

    Args:
        config: Reminder configuration (memory backend if None)
        use_mock: If True, force the in-memory store
    """
    if use_mock or config is None or config.backend == "memory":
        logger.info("Reminders: Using in-memory store")
        return InMemoryReminderStore()
    return MongoReminderStore.from_config(config)


__all__ = [
    "InMemoryReminderStore",
    "MongoReminderStore",
    "Reminder",
    "ReminderKind",
    "ReminderStore",
    "ReminderStoreError",
    "create_reminder_store",
    "retry_on_connection_failure",
]
