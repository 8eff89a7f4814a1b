"""Topic narration for the news follow-up.

Produces a short spoken news report for a topic. When a search client is
available the report is grounded on current headlines.
"""

import logging
from typing import Protocol

from ..search import SearchClient
from .client import ClaudeClient
from .errors import ClassifierError, ContentError

logger = logging.getLogger(__name__)


class ContentService(Protocol):
    """Interface for topic narration."""

    def fetch_narration(self, topic: str) -> str:
        """Return a spoken narration for topic.

        Raises:
            ContentError: If no narration can be produced
        """
        ...


def build_narration_prompt(topic: str, region: str, context: str = "") -> str:
    prompt = (
        f"Faça um breve boletim de notícias falado sobre '{topic}', com foco no Brasil "
        f"e em {region} quando fizer sentido. Use no máximo quatro frases curtas, sem "
        "listas, links ou formatação, pois o texto será lido em voz alta."
    )
    if context:
        prompt += f"\n\nUse apenas estas manchetes recentes:\n{context}"
    return prompt


NARRATION_SYSTEM_PROMPT = (
    "Você é o Smart Home Assistant, um locutor de notícias conciso. Responda sempre em português."
)


class ClaudeContentService:
    """Narration generated by Claude, optionally grounded by search."""

    def __init__(
        self,
        client: ClaudeClient,
        search: SearchClient | None = None,
        region: str = "Maricá-RJ",
        max_results: int = 5,
    ) -> None:
        self._client = client
        self._search = search
        self._region = region
        self._max_results = max_results

    def _headlines(self, topic: str) -> str:
        if self._search is None:
            return ""
        result = self._search.search(f"notícias {topic} Brasil", max_results=self._max_results)
        if not result.success:
            logger.warning("News search failed, narrating without headlines: %s", result.error)
            return ""
        return result.as_context()

    def fetch_narration(self, topic: str) -> str:
        """Return a spoken narration for topic.

        Raises:
            ContentError: If the topic is empty or the model request fails
        """
        topic = topic.strip()
        if not topic:
            raise ContentError("Empty topic")

        context = self._headlines(topic)
        prompt = build_narration_prompt(topic, self._region, context)

        try:
            response = self._client.complete(NARRATION_SYSTEM_PROMPT, prompt)
        except ClassifierError as e:
            raise ContentError(f"Narration request failed: {e}") from e

        narration = response.text.strip()
        if not narration:
            raise ContentError("Empty narration")

        logger.info(
            "Narration for '%s' (%s, %dms)",
            topic,
            "grounded" if context else "ungrounded",
            response.latency_ms,
        )
        return narration


__all__ = ["ClaudeContentService", "ContentService", "build_narration_prompt"]
