"""Claude API client shared by the classifier and content service."""

import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anthropic

from .errors import (
    ClassifierAPIError,
    ClassifierAuthError,
    ClassifierConnectivityError,
    ClassifierTimeoutError,
)

if TYPE_CHECKING:
    from ..config import LLMConfig


@dataclass
class ClaudeClientConfig:
    """Configuration for Claude client."""

    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 400
    temperature: float = 0.4
    timeout_seconds: float = 8.0

    @classmethod
    def from_env(cls, llm: "LLMConfig | None" = None) -> "ClaudeClientConfig":
        """Create config from environment variables and LLM settings.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not set.
        """
        api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Set it to enable voice commands."
            )
        if llm is None:
            return cls(api_key=api_key)
        return cls(
            api_key=api_key,
            model=llm.model,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
            timeout_seconds=llm.timeout_seconds,
        )


@dataclass
class ClaudeResponse:
    """Response from Claude API."""

    text: str
    tokens_used: int
    model: str
    latency_ms: int


class ClaudeClient:
    """Client for single-turn Claude requests."""

    def __init__(self, config: ClaudeClientConfig) -> None:
        self._config = config
        self._client = anthropic.Anthropic(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
        )

    @property
    def config(self) -> ClaudeClientConfig:
        return self._config

    def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int | None = None,
    ) -> ClaudeResponse:
        """Send one user message and return the reply.

        Args:
            system: System prompt.
            prompt: User message.
            max_tokens: Override of the configured token limit.

        Raises:
            ClassifierTimeoutError: If the request times out.
            ClassifierAPIError: If the API returns an error.
            ClassifierAuthError: If authentication fails.
            ClassifierConnectivityError: If network is unavailable.
        """
        start_time = time.time()

        try:
            response = self._client.messages.create(
                model=self._config.model,
                max_tokens=max_tokens or self._config.max_tokens,
                temperature=self._config.temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AuthenticationError as e:
            raise ClassifierAuthError(
                "Invalid API key. Please check your ANTHROPIC_API_KEY."
            ) from e
        except anthropic.APITimeoutError as e:
            # Timeout is a subclass of connection error, so it goes first
            raise ClassifierTimeoutError(
                f"Request timed out after {self._config.timeout_seconds} seconds."
            ) from e
        except anthropic.APIConnectionError as e:
            raise ClassifierConnectivityError(f"Failed to connect to Claude API: {e}") from e
        except anthropic.APIStatusError as e:
            raise ClassifierAPIError(f"API error: {e.message}", status_code=e.status_code) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return ClaudeResponse(
            text=text,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens,
            model=response.model,
            latency_ms=int((time.time() - start_time) * 1000),
        )


__all__ = ["ClaudeClient", "ClaudeClientConfig", "ClaudeResponse"]
