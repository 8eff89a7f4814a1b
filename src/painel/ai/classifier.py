"""Intent classification of voice commands with Claude.

The model answers with one JSON object:

    {"action": "add_reminder" | "chat" | "read_news_init",
     "text": "...", "type": "info" | "alert" | "action", "response": "..."}

which is parsed into an Intent.
"""

import json
import logging
import re
from typing import Any, Protocol

from ..reminders.models import ReminderKind
from .client import ClaudeClient
from .errors import ClassifierError, ClassifierResponseError
from .intent import Intent, IntentAction

logger = logging.getLogger(__name__)

DEFAULT_TOPIC_QUESTION = "Sobre qual assunto você quer ouvir? Política, esportes ou cultura?"

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def build_system_prompt(region: str = "Maricá-RJ") -> str:
    """System prompt for the Smart Home Assistant persona."""
    return (
        f"Você é o Smart Home Assistant, o assistente de voz de um painel doméstico em {region}. "
        "Analise o comando de voz do usuário e responda APENAS com um objeto JSON, sem texto "
        "adicional, no formato:\n"
        '{"action": "add_reminder" | "chat" | "read_news_init", "text": "...", '
        '"type": "info" | "alert" | "action", "response": "..."}\n'
        "Regras:\n"
        '- "add_reminder": o usuário quer anotar algo. "text" é o lembrete, curto e sem o verbo '
        '"lembrar". "type" é "alert" para algo urgente, "action" para uma tarefa e "info" nos '
        "demais casos.\n"
        '- "read_news_init": o usuário quer ouvir notícias. Se ele disse o assunto, coloque-o em '
        '"text". Se não disse, omita "text" e pergunte o assunto em "response".\n'
        '- "chat": qualquer outro pedido. "response" é a resposta.\n'
        '"response" é sempre curta, em português, e será lida em voz alta.'
    )


class IntentClassifier(Protocol):
    """Interface for command classification."""

    def classify(self, transcript: str) -> Intent:
        """Classify a final command transcript.

        Raises:
            ClassifierError: On request failure or an unusable reply
        """
        ...


def _extract_json(raw: str) -> dict[str, Any]:
    """Pull the first JSON object out of a model reply.

    Tolerates code fences and prose around the object.

    Raises:
        ClassifierResponseError: If no JSON object can be decoded
    """
    fenced = _FENCE_RE.search(raw)
    candidate = fenced.group(1) if fenced else raw

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise ClassifierResponseError(f"No JSON object in reply: {raw[:80]!r}")

    try:
        data = json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as e:
        raise ClassifierResponseError(f"Invalid JSON in reply: {e}") from e

    if not isinstance(data, dict):
        raise ClassifierResponseError("Reply JSON is not an object")
    return data


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_intent(raw: str, transcript: str = "") -> Intent:
    """Parse a classifier reply into an Intent.

    Args:
        raw: Model reply text
        transcript: The classified transcript, used as reminder text when the
            model omits it

    Raises:
        ClassifierResponseError: If the reply is not a usable intent
    """
    data = _extract_json(raw)

    try:
        action = IntentAction(str(data.get("action", "")).strip().lower())
    except ValueError as e:
        raise ClassifierResponseError(f"Unknown action: {data.get('action')!r}") from e

    text = _optional_text(data.get("text"))
    response = _optional_text(data.get("response")) or ""

    if action is IntentAction.ADD_REMINDER:
        text = text or _optional_text(transcript)
        if text is None:
            raise ClassifierResponseError("Reminder without text")
        return Intent(
            action=action,
            text=text,
            reminder_kind=ReminderKind.from_wire(data.get("type")),
            spoken_response=response,
        )

    if action is IntentAction.INITIATE_FOLLOW_TOPIC:
        return Intent(
            action=action,
            text=text,
            spoken_response=response or ("" if text else DEFAULT_TOPIC_QUESTION),
        )

    if not response:
        raise ClassifierResponseError("Chat reply without response")
    return Intent(action=action, spoken_response=response)


class ClaudeIntentClassifier:
    """Classifies commands with a single Claude request."""

    def __init__(self, client: ClaudeClient, region: str = "Maricá-RJ") -> None:
        self._client = client
        self._system_prompt = build_system_prompt(region)

    def classify(self, transcript: str) -> Intent:
        """Classify a final command transcript.

        Raises:
            ClassifierError: On request failure or an unusable reply
        """
        if not transcript.strip():
            raise ClassifierResponseError("Empty transcript")

        response = self._client.complete(self._system_prompt, transcript)
        logger.debug("Classifier reply (%dms): %s", response.latency_ms, response.text)

        intent = parse_intent(response.text, transcript)
        logger.info("Classified '%s' as %s", transcript, intent.action.name)
        return intent


__all__ = [
    "ClassifierError",
    "ClaudeIntentClassifier",
    "DEFAULT_TOPIC_QUESTION",
    "IntentClassifier",
    "build_system_prompt",
    "parse_intent",
]
