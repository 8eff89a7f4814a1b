"""News search module for the Painel voice assistant.

Search is optional: without tavily-python or a TAVILY_API_KEY, narration
falls back to the language model alone.
"""

import logging
import os
from typing import Protocol

from .mock import MockSearch
from .tavily import TAVILY_AVAILABLE, SearchResult, TavilySearch

logger = logging.getLogger(__name__)


class SearchClient(Protocol):
    """Interface for topic search."""

    def search(self, query: str, max_results: int = 5) -> SearchResult:
        """Search for query, never raising on provider errors."""
        ...


def create_search_client(
    api_key: str | None = None,
    use_mock: bool = False,
) -> SearchClient | None:
    """Create a search client.

    Args:
        api_key: Tavily API key (optional, uses env var if not provided)
        use_mock: If True, return mock client for testing

    Returns:
        Search client, or None when search cannot be used
    """
    if use_mock:
        logger.info("Using mock search client (explicitly requested)")
        return MockSearch()

    if not TAVILY_AVAILABLE:
        logger.warning("tavily-python not installed, narration will not be grounded")
        return None

    if not (api_key or os.environ.get("TAVILY_API_KEY")):
        logger.warning("No TAVILY_API_KEY found in environment, narration will not be grounded")
        return None

    try:
        return TavilySearch(api_key=api_key)
    except RuntimeError as e:
        logger.error("Failed to create Tavily client: %s", e)
        return None


__all__ = [
    "MockSearch",
    "SearchClient",
    "SearchResult",
    "TavilySearch",
    "create_search_client",
]
