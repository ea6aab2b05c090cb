"""LLM client for the Groq chat-completions API.

Groq exposes an OpenAI-compatible endpoint, so the official ``openai`` SDK is
used with Groq's base URL. Each call is a single attempt: the SDK's own
retries are disabled and any failure is raised immediately so the caller can
switch to the fallback plan.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Literal

import openai
import structlog
from openai import OpenAI

from learnplan.config import LLMSettings
from learnplan.errors import UpstreamError, UpstreamTimeoutError
from learnplan.utils.text_utils import strip_think

logger = structlog.get_logger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama3-8b-8192"
    temperature: float = 0.7
    max_tokens: int = 4000
    timeout: int = 60
    api_key: str | None = None

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> LLMConfig:
        """Build from the application's LLM settings."""
        return cls(
            base_url=settings.base_url,
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            api_key=settings.api_key,
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


class LLMError(UpstreamError):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error status or empty/invalid body from the LLM server."""

    pass


class LLMTimeoutError(LLMError, UpstreamTimeoutError):
    """LLM request exceeded the configured timeout."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Chat-completion client (one attempt per call, no retries)."""

    def __init__(self, config: LLMConfig | None = None, model: str | None = None):
        """Initialize LLM client.

        Args:
            config: LLM configuration (defaults if not provided)
            model: Override model from config
        """
        self.config = config or LLMConfig()
        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-configured",
            timeout=self.config.timeout,
            max_retries=0,
        )

        logger.info(
            "llm_client_initialized",
            model=self.config.model,
            base_url=self.config.base_url,
            configured=self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        """True when an API key is present."""
        return bool(self.config.api_key)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            LLMResponse with content (reasoning tags stripped) and metadata

        Raises:
            LLMTimeoutError: If the request times out
            LLMConnectionError: If cannot connect to server
            LLMResponseError: If server returns an error status or no choices
            LLMError: For any other SDK failure
        """
        if temperature is None:
            temperature = self.config.temperature
        if max_tokens is None:
            max_tokens = self.config.max_tokens

        start_time = time.time()

        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(
                f"LLM request timed out after {self.config.timeout}s"
            ) from e
        except openai.APIConnectionError as e:
            raise LLMConnectionError(
                f"Could not connect to LLM at {self.config.base_url}: {e}"
            ) from e
        except openai.APIStatusError as e:
            raise LLMResponseError(
                f"LLM returned HTTP {e.status_code}: {e.message}"
            ) from e
        except Exception as e:
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = strip_think(response.choices[0].message.content or "")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage,
            latency_ms=latency_ms,
        )

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Simple chat with system prompt and user message.

        Args:
            system_prompt: System prompt
            user_message: User message
            temperature: Override temperature
            max_tokens: Override max tokens

        Returns:
            Response content as string
        """
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return response.content

    def is_available(self) -> bool:
        """Check if the LLM server is reachable with the configured key.

        Returns:
            True if server responds, False otherwise
        """
        if not self.is_configured:
            return False
        try:
            self._client.models.list()
            return True
        except openai.OpenAIError:
            return False
