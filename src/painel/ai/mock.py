"""Mock classifier and content service for testing."""

from .errors import ContentError
from .intent import Intent, IntentAction


class MockIntentClassifier:
    """Returns scripted intents and records transcripts.

    Intents are looked up by exact transcript first, then taken from the
    queue, then the default CHAT echo is used.
    """

    def __init__(self, default: Intent | None = None) -> None:
        self._by_transcript: dict[str, Intent | Exception] = {}
        self._queue: list[Intent | Exception] = []
        self._default = default
        self.transcripts: list[str] = []

    def when(self, transcript: str, result: Intent | Exception) -> None:
        """Script the result for one transcript."""
        self._by_transcript[transcript] = result

    def enqueue(self, result: Intent | Exception) -> None:
        """Script the result of the next unmatched call."""
        self._queue.append(result)

    def classify(self, transcript: str) -> Intent:
        self.transcripts.append(transcript)
        if transcript in self._by_transcript:
            result = self._by_transcript[transcript]
        elif self._queue:
            result = self._queue.pop(0)
        elif self._default is not None:
            result = self._default
        else:
            result = Intent(action=IntentAction.CHAT, spoken_response=f"Você disse: {transcript}")

        if isinstance(result, Exception):
            raise result
        return result

    @property
    def call_count(self) -> int:
        return len(self.transcripts)


class MockContentService:
    """Returns a canned narration and records topics."""

    def __init__(self, narration: str = "Sem novidades sobre {topic}.") -> None:
        self._narration = narration
        self._error: Exception | None = None
        self.topics: list[str] = []

    def fail_with(self, error: Exception | None = None) -> None:
        """Make every later call raise error (ContentError by default)."""
        self._error = error or ContentError("Simulated content failure")

    def fetch_narration(self, topic: str) -> str:
        self.topics.append(topic)
        if self._error is not None:
            raise self._error
        return self._narration.format(topic=topic)


__all__ = ["MockContentService", "MockIntentClassifier"]
