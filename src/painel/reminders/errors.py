"""Error types for the reminder store."""


class ReminderStoreError(Exception):
    """Raised when a reminder cannot be stored, listed or deleted."""

    pass


__all__ = ["ReminderStoreError"]
