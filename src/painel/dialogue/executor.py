"""Action executor.

Performs the side effect of an intent and decides what to say back.
External calls run in worker threads under a timeout; any failure turns
into a spoken apology.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from ..ai.content import ContentService
from ..ai.errors import ContentError
from ..ai.intent import Intent, IntentAction
from ..logger.interaction import CycleOutcome
from ..reminders.errors import ReminderStoreError
from ..reminders.models import ReminderKind
from ..reminders.store import ReminderStore

if TYPE_CHECKING:
    from ..config import PainelConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: object, timeout: float) -> T:
    """Run a blocking call in a worker thread, bounded by timeout.

    Raises:
        asyncio.TimeoutError: If the call does not finish in time. The
            worker thread is abandoned, not interrupted.
    """
    return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)


@dataclass(frozen=True)
class ExecutionOutcome:
    """What the controller should do after an intent ran.

    Attributes:
        response: Text to speak
        rate: Speech rate for the response
        awaits_follow_up: True if the next command answers a question
        outcome: Cycle outcome for the interaction log
        error: Failure description, if the side effect failed
    """

    response: str
    rate: float = 1.0
    awaits_follow_up: bool = False
    outcome: CycleOutcome = CycleOutcome.COMPLETED
    error: str | None = None


class ActionExecutor:
    """Dispatches intents to the reminder store and content service."""

    def __init__(
        self,
        store: ReminderStore,
        content: ContentService,
        speech_rate: float = 1.0,
        narration_rate: float = 1.2,
        store_timeout: float = 5.0,
        content_timeout: float = 20.0,
        reminder_apology: str = "Desculpe, não consegui salvar o lembrete.",
        content_apology: str = "Desculpe, não consegui buscar esse assunto agora.",
    ) -> None:
        self._store = store
        self._content = content
        self._speech_rate = speech_rate
        self._narration_rate = narration_rate
        self._store_timeout = store_timeout
        self._content_timeout = content_timeout
        self._reminder_apology = reminder_apology
        self._content_apology = content_apology

    @classmethod
    def from_config(
        cls,
        config: "PainelConfig",
        store: ReminderStore,
        content: ContentService,
    ) -> "ActionExecutor":
        return cls(
            store,
            content,
            speech_rate=config.tts.rate,
            narration_rate=config.tts.narration_rate,
            store_timeout=config.reminders.timeout_seconds,
            content_timeout=config.content.timeout_seconds,
            reminder_apology=config.dialogue.reminder_apology,
            content_apology=config.dialogue.content_apology,
        )

    async def execute(self, intent: Intent) -> ExecutionOutcome:
        """Run the intent's side effect. Never raises."""
        if intent.action is IntentAction.ADD_REMINDER:
            return await self._add_reminder(intent)

        if intent.arms_follow_up:
            return ExecutionOutcome(
                response=intent.spoken_response,
                rate=self._speech_rate,
                awaits_follow_up=True,
                outcome=CycleOutcome.FOLLOW_UP,
            )

        if intent.action is IntentAction.INITIATE_FOLLOW_TOPIC:
            return await self._narrate(intent.text or "")

        return ExecutionOutcome(response=intent.spoken_response, rate=self._speech_rate)

    async def _add_reminder(self, intent: Intent) -> ExecutionOutcome:
        text = intent.text or ""
        kind = intent.reminder_kind or ReminderKind.INFO
        try:
            reminder_id = await run_blocking(
                self._store.commit, text, kind, timeout=self._store_timeout
            )
        except asyncio.TimeoutError:
            return self._reminder_failed(f"Reminder store timed out after {self._store_timeout}s")
        except ReminderStoreError as e:
            return self._reminder_failed(str(e))
        except Exception as e:
            logger.exception("Unexpected reminder store failure")
            return self._reminder_failed(str(e))

        logger.info("Reminder %s added: %s", reminder_id, text)
        return ExecutionOutcome(
            response=intent.spoken_response or f"Adicionado: {text}",
            rate=self._speech_rate,
        )

    def _reminder_failed(self, error: str) -> ExecutionOutcome:
        logger.warning("Reminder not saved: %s", error)
        return ExecutionOutcome(
            response=self._reminder_apology,
            rate=self._speech_rate,
            outcome=CycleOutcome.REMINDER_FAILED,
            error=error,
        )

    async def _narrate(self, topic: str) -> ExecutionOutcome:
        try:
            narration = await run_blocking(
                self._content.fetch_narration, topic, timeout=self._content_timeout
            )
        except asyncio.TimeoutError:
            return self._content_failed(f"Content service timed out after {self._content_timeout}s")
        except ContentError as e:
            return self._content_failed(str(e))
        except Exception as e:
            logger.exception("Unexpected content service failure")
            return self._content_failed(str(e))

        return ExecutionOutcome(response=narration, rate=self._narration_rate)

    def _content_failed(self, error: str) -> ExecutionOutcome:
        logger.warning("Narration failed: %s", error)
        return ExecutionOutcome(
            response=self._content_apology,
            rate=self._speech_rate,
            outcome=CycleOutcome.CONTENT_FAILED,
            error=error,
        )


__all__ = ["ActionExecutor", "ExecutionOutcome", "run_blocking"]
