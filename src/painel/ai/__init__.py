"""Language-model services for the Painel voice assistant.

Usage:
    classifier, content = create_ai_services(config)
"""

import logging
from typing import TYPE_CHECKING

from ..search import create_search_client
from .classifier import ClaudeIntentClassifier, IntentClassifier, parse_intent
from .client import ClaudeClient, ClaudeClientConfig, ClaudeResponse
from .content import ClaudeContentService, ContentService
from .errors import (
    ClassifierAPIError,
    ClassifierAuthError,
    ClassifierConnectivityError,
    ClassifierError,
    ClassifierResponseError,
    ClassifierTimeoutError,
    ContentError,
)
from .intent import Intent, IntentAction
from .mock import MockContentService, MockIntentClassifier

if TYPE_CHECKING:
    from ..config import PainelConfig

logger = logging.getLogger(__name__)


def create_ai_services(
    config: "PainelConfig",
    use_mock: bool = False,
) -> tuple[IntentClassifier, ContentService]:
    """Create the classifier and content service.

    Falls back to the mocks when ANTHROPIC_API_KEY is missing so the panel
    still answers (with canned replies) during development.
    """
    if use_mock:
        return MockIntentClassifier(), MockContentService()

    try:
        client = ClaudeClient(ClaudeClientConfig.from_env(config.llm))
    except ValueError as e:
        logger.warning("Claude unavailable, using mock classifier: %s", e)
        return MockIntentClassifier(), MockContentService()

    search = create_search_client() if config.content.search_enabled else None
    classifier = ClaudeIntentClassifier(client, region=config.content.region)
    content = ClaudeContentService(
        client,
        search=search,
        region=config.content.region,
        max_results=config.content.max_results,
    )
    logger.info("AI services: Claude %s (search: %s)", client.config.model, search is not None)
    return classifier, content


__all__ = [
    "ClassifierAPIError",
    "ClassifierAuthError",
    "ClassifierConnectivityError",
    "ClassifierError",
    "ClassifierResponseError",
    "ClassifierTimeoutError",
    "ClaudeClient",
    "ClaudeClientConfig",
    "ClaudeContentService",
    "ClaudeIntentClassifier",
    "ClaudeResponse",
    "ContentError",
    "ContentService",
    "Intent",
    "IntentAction",
    "IntentClassifier",
    "MockContentService",
    "MockIntentClassifier",
    "create_ai_services",
    "parse_intent",
]
