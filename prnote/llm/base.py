"""Base classes and shared types for LLM providers."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from prnote.llm.exceptions import (
    LLMError,
    MissingAPIKeyError,
    ProviderError,
    ProviderErrorKind,
    classify_error,
)


class FinishStatus(Enum):
    """Why a generation call stopped."""

    COMPLETE = "complete"
    LENGTH_LIMITED = "length_limited"
    OTHER = "other"


@dataclass(frozen=True)
class Message:
    """A prior conversation turn replayed to the model."""

    role: str  # "user" or "assistant"
    content: str


@dataclass(frozen=True)
class GenerationRequest:
    """A single, immutable generation request."""

    prompt: str
    temperature: float
    max_output_tokens: int
    model_name: str
    system_instruction: str
    history: tuple[Message, ...] = ()

    def with_model(self, model_name: str) -> "GenerationRequest":
        return replace(self, model_name=model_name)

    def with_max_output_tokens(self, max_output_tokens: int) -> "GenerationRequest":
        return replace(self, max_output_tokens=max_output_tokens)

    def messages(self) -> list[Message]:
        """All user/assistant turns in order, ending with the prompt."""
        return [*self.history, Message(role="user", content=self.prompt)]


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting reported by the backend."""

    prompt_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    # Only set when the backend reports reasoning/thinking tokens explicitly
    reasoning_tokens: Optional[int] = None


@dataclass(frozen=True)
class GenerationResult:
    """Result from a generation call."""

    text: str
    finish_status: FinishStatus
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""


def _int_or_zero(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Subclasses set `name` and `api_key_env_var`, translate a GenerationRequest
    into their SDK call in `_submit`, and leave error normalization to
    `generate`.
    """

    name: str = "LLM"
    api_key_env_var: str = ""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the provider.

        Args:
            api_key: API key to use. Falls back to the provider's environment
                variable when not given.
        """
        self._api_key = api_key
        self._client = None

    def get_api_key(self) -> str:
        """Get the API key from the constructor or the environment.

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        if self._api_key:
            return self._api_key

        api_key = os.getenv(self.api_key_env_var) if self.api_key_env_var else None
        if api_key:
            return api_key

        raise MissingAPIKeyError(
            f"{self.name} API key not found. Set it using:\n"
            f"  1. The action input: api_key\n"
            f"  2. Environment variable: export {self.api_key_env_var}=your_key_here"
        )

    @property
    def client(self):
        """SDK client, created once per provider instance."""
        if self._client is None:
            self._client = self._create_client(self.get_api_key())
        return self._client

    @abstractmethod
    def _create_client(self, api_key: str):
        """Create the SDK client for this provider."""
        pass

    @abstractmethod
    def _submit(self, request: GenerationRequest) -> GenerationResult:
        """Send the request through the SDK and map the response."""
        pass

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Submit a generation request.

        Args:
            request: The request to send.

        Returns:
            A GenerationResult tagged with the model that served it.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For any backend failure, already classified.
        """
        try:
            return self._submit(request)
        except (MissingAPIKeyError, ProviderError):
            raise
        except Exception as e:
            raise classify_error(e, self.name) from e


__all__ = [
    "BaseLLMProvider",
    "FinishStatus",
    "GenerationRequest",
    "GenerationResult",
    "LLMError",
    "Message",
    "MissingAPIKeyError",
    "ProviderError",
    "ProviderErrorKind",
    "TokenUsage",
]
