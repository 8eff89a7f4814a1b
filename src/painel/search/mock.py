"""Mock search client for testing."""

from .tavily import SearchResult


class MockSearch:
    """Returns canned headlines and records queries."""

    def __init__(self, results: list[dict[str, str]] | None = None, fail: bool = False) -> None:
        self._results = results
        self._fail = fail
        self.queries: list[str] = []

    def search(self, query: str, max_results: int = 5, **_: object) -> SearchResult:
        self.queries.append(query)
        if self._fail:
            return SearchResult(query=query, success=False, error="mock failure")
        results = self._results
        if results is None:
            results = [
                {
                    "title": f"Manchete sobre {query}",
                    "url": "https://example.com/1",
                    "content": f"Conteúdo simulado sobre {query}",
                }
            ]
        return SearchResult(query=query, results=results[:max_results])


__all__ = ["MockSearch"]
