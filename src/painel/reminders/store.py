"""MongoDB reminder store.

Provides retry on connection failures and translates driver errors into
ReminderStoreError.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from .errors import ReminderStoreError
from .models import Reminder, ReminderKind

if TYPE_CHECKING:
    from ..config import ReminderConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReminderStore(Protocol):
    """Interface for reminder persistence."""

    def commit(self, text: str, kind: ReminderKind) -> str:
        """Store a reminder and return its ID.

        Raises:
            ReminderStoreError: If the reminder cannot be stored
        """
        ...

    def list_recent(self, limit: int = 20) -> list[Reminder]:
        """Return reminders, most recent first."""
        ...

    def delete(self, reminder_id: str) -> bool:
        """Delete a reminder. Returns True if it existed."""
        ...


def retry_on_connection_failure(
    max_retries: int = 3,
    base_delay: float = 0.5,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for exponential backoff retry on connection failures.

    Args:
        max_retries: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            "Connection failed (attempt %d/%d), retrying in %.1fs: %s",
                            attempt + 1,
                            max_retries,
                            delay,
                            str(e),
                        )
                        time.sleep(delay)
                    else:
                        logger.error("Connection failed after %d attempts: %s", max_retries, str(e))

            if last_exception:
                raise last_exception
            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator


class MongoReminderStore:
    """Reminder store backed by a MongoDB collection."""

    def __init__(
        self,
        collection: Collection[dict[str, Any]],
        clock: Callable[[], datetime] | None = None,
        retry_base_delay: float = 0.5,
    ) -> None:
        """Initialize the store.

        Args:
            collection: MongoDB collection holding reminder documents.
            clock: Returns the creation timestamp (UTC); for tests.
            retry_base_delay: Base backoff delay for connection retries.
        """
        self._collection = collection
        self._clock = clock
        self._indexes_ready = False
        retry = retry_on_connection_failure(base_delay=retry_base_delay)
        self._insert = retry(self._insert_once)
        self._find_recent = retry(self._find_recent_once)
        self._delete = retry(self._delete_once)

    @classmethod
    def from_config(cls, config: "ReminderConfig") -> "MongoReminderStore":
        """Create a store from configuration.

        The client connects lazily, so an unreachable server surfaces as a
        ReminderStoreError on first use rather than at startup.
        """
        client: MongoClient[dict[str, Any]] = MongoClient(
            config.uri,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
            connectTimeoutMS=config.server_selection_timeout_ms,
        )
        logger.info("Reminder store: %s/%s", config.database, config.collection)
        return cls(client[config.database][config.collection])

    def _ensure_indexes(self) -> None:
        if not self._indexes_ready:
            self._collection.create_index([("created_at", DESCENDING)])
            self._indexes_ready = True

    def _insert_once(self, doc: dict[str, Any]) -> str:
        self._ensure_indexes()
        return str(self._collection.insert_one(doc).inserted_id)

    def _find_recent_once(self, limit: int) -> list[dict[str, Any]]:
        return list(self._collection.find().sort("created_at", DESCENDING).limit(limit))

    def _delete_once(self, object_id: ObjectId) -> int:
        return self._collection.delete_one({"_id": object_id}).deleted_count

    def commit(self, text: str, kind: ReminderKind) -> str:
        """Store a reminder and return its document ID.

        Raises:
            ReminderStoreError: On empty text or any database failure.
        """
        if not text or not text.strip():
            raise ReminderStoreError("Reminder text is empty")

        now = self._clock() if self._clock is not None else None
        reminder = Reminder.create(text, kind, now=now)
        try:
            reminder_id = self._insert(reminder.to_dict())
        except PyMongoError as e:
            raise ReminderStoreError(f"Failed to store reminder: {e}") from e

        logger.info("Stored reminder %s (%s): %s", reminder_id, kind.value, reminder.text)
        return reminder_id

    def list_recent(self, limit: int = 20) -> list[Reminder]:
        """Return reminders, most recent first.

        Raises:
            ReminderStoreError: On database failure.
        """
        try:
            docs = self._find_recent(limit)
        except PyMongoError as e:
            raise ReminderStoreError(f"Failed to list reminders: {e}") from e
        return [Reminder.from_dict(doc) for doc in docs]

    def delete(self, reminder_id: str) -> bool:
        """Delete a reminder by ID.

        Returns:
            True if a document was deleted, False if the ID is unknown or invalid.

        Raises:
            ReminderStoreError: On database failure.
        """
        try:
            object_id = ObjectId(reminder_id)
        except (InvalidId, TypeError):
            return False

        try:
            return self._delete(object_id) > 0
        except PyMongoError as e:
            raise ReminderStoreError(f"Failed to delete reminder: {e}") from e


__all__ = ["MongoReminderStore", "ReminderStore", "retry_on_connection_failure"]
