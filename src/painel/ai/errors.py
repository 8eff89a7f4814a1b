"""Error types for the language-model services.

The Claude client raises ClassifierError subclasses for every request
failure. ContentService wraps them in ContentError.
"""


class ClassifierError(Exception):
    """Base exception for intent classification failures."""

    pass


class ClassifierTimeoutError(ClassifierError):
    """Raised when the Claude API request times out."""

    pass


class ClassifierAPIError(ClassifierError):
    """Raised when the Claude API returns an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize API error.

        Args:
            message: Error message.
            status_code: HTTP status code if available.
        """
        super().__init__(message)
        self.status_code = status_code


class ClassifierAuthError(ClassifierError):
    """Raised when authentication fails."""

    pass


class ClassifierConnectivityError(ClassifierError):
    """Raised when the Claude API cannot be reached."""

    pass


class ClassifierResponseError(ClassifierError):
    """Raised when the model reply is not a valid intent."""

    pass


class ContentError(Exception):
    """Raised when a topic narration cannot be produced."""

    pass


__all__ = [
    "ClassifierAPIError",
    "ClassifierAuthError",
    "ClassifierConnectivityError",
    "ClassifierError",
    "ClassifierResponseError",
    "ClassifierTimeoutError",
    "ContentError",
]
