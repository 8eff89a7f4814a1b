"""Tavily search integration for grounding news narration.

Fetches current headlines for a topic so the narration reflects real
events instead of the model's training data.
"""

import logging
import os
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

TAVILY_AVAILABLE = False
try:
    from tavily import TavilyClient

    TAVILY_AVAILABLE = True
except ImportError:
    TavilyClient = None


@dataclass
class SearchResult:
    """Result from a web search.

    Attributes:
        query: The original search query
        answer: Direct answer to the query (if available)
        results: List of search result summaries (title, url, content)
        success: Whether the search was successful
        error: Error message if search failed
    """

    query: str
    answer: str | None = None
    results: list[dict[str, str]] = field(default_factory=list)
    success: bool = True
    error: str | None = None

    def as_context(self, max_chars: int = 600) -> str:
        """Render results as a compact block for an LLM prompt."""
        lines = []
        if self.answer:
            lines.append(f"Resumo: {self.answer}")
        for r in self.results:
            content = r.get("content", "")[:max_chars]
            lines.append(f"- {r.get('title', '')}: {content}")
        return "\n".join(lines)


class TavilySearch:
    """News search using the Tavily API."""

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize Tavily search client.

        Args:
            api_key: Tavily API key. Defaults to TAVILY_API_KEY.

        Raises:
            RuntimeError: If Tavily is not available or no API key provided.
        """
        if not TAVILY_AVAILABLE:
            raise RuntimeError("Tavily not available. Install with: pip install tavily-python")

        self._api_key = api_key or os.environ.get("TAVILY_API_KEY")
        if not self._api_key:
            raise RuntimeError("Tavily API key required. Set TAVILY_API_KEY env var.")

        self._client = TavilyClient(api_key=self._api_key)
        logger.info("Tavily search client initialized")

    def search(
        self,
        query: str,
        max_results: int = 5,
        topic: str = "news",
        max_retries: int = 2,
        retry_delay: float = 0.5,
    ) -> SearchResult:
        """Search with retry on transient failures.

        Args:
            query: The search query
            max_results: Maximum number of results to return
            topic: Tavily topic ("news" or "general")
            max_retries: Retry attempts after the first failure
            retry_delay: Base delay between retries in seconds

        Returns:
            SearchResult; success is False when every attempt failed
        """
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                if attempt > 0:
                    logger.info("Retry attempt %d for query: '%s'", attempt, query)
                    time.sleep(retry_delay * attempt)

                response = self._client.search(
                    query=query,
                    max_results=max_results,
                    topic=topic,
                    include_answer=True,
                )

                results = [
                    {
                        "title": r.get("title", ""),
                        "url": r.get("url", ""),
                        "content": r.get("content", ""),
                    }
                    for r in response.get("results", [])
                ]
                logger.info("Search completed: %d results for '%s'", len(results), query)
                return SearchResult(query=query, answer=response.get("answer"), results=results)

            except Exception as e:
                last_error = e
                error_str = str(e).lower()

                if "invalid api key" in error_str or "unauthorized" in error_str:
                    logger.error("Search failed (auth error, not retrying): %s", e)
                    break

                if attempt < max_retries:
                    logger.warning("Search attempt %d failed: %s", attempt + 1, e)
                else:
                    logger.error("Search failed after %d attempts: %s", max_retries + 1, e)

        return SearchResult(
            query=query,
            success=False,
            error=str(last_error) if last_error else "Unknown error",
        )


__all__ = ["TAVILY_AVAILABLE", "SearchResult", "TavilySearch"]
