"""LLM provider module for prnote.

This module provides a unified interface to multiple LLM providers and the
orchestrator that makes calls to them resilient.
"""

from typing import Optional

from dotenv import load_dotenv

from prnote.config import DEFAULT_PROVIDER, LLMProvider
from prnote.llm.base import (
    BaseLLMProvider,
    FinishStatus,
    GenerationRequest,
    GenerationResult,
    Message,
    TokenUsage,
)
from prnote.llm.exceptions import (
    LLMError,
    MissingAPIKeyError,
    ProviderError,
    ProviderErrorKind,
)
from prnote.llm.orchestrator import GenerationOrchestrator

# Load environment variables from .env file
load_dotenv()


def get_provider(
    provider: Optional[LLMProvider] = None,
    api_key: Optional[str] = None,
) -> BaseLLMProvider:
    """Get an LLM provider instance.

    Args:
        provider: The provider to use. Defaults to DEFAULT_PROVIDER.
        api_key: The API key. Defaults to the provider's environment variable.

    Returns:
        An instance of the appropriate LLM provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    provider = provider or DEFAULT_PROVIDER

    if provider == LLMProvider.GOOGLE:
        from prnote.llm.google_provider import GoogleProvider

        return GoogleProvider(api_key=api_key)

    elif provider == LLMProvider.OPENAI:
        from prnote.llm.openai_provider import OpenAIProvider

        return OpenAIProvider(api_key=api_key)

    elif provider == LLMProvider.ANTHROPIC:
        from prnote.llm.anthropic_provider import AnthropicProvider

        return AnthropicProvider(api_key=api_key)

    elif provider == LLMProvider.GROQ:
        from prnote.llm.groq_provider import GroqProvider

        return GroqProvider(api_key=api_key)

    elif provider == LLMProvider.COHERE:
        from prnote.llm.cohere_provider import CohereProvider

        return CohereProvider(api_key=api_key)

    elif provider == LLMProvider.OPENROUTER:
        from prnote.llm.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(api_key=api_key)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


# Export commonly used items
__all__ = [
    "BaseLLMProvider",
    "FinishStatus",
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationResult",
    "LLMError",
    "Message",
    "MissingAPIKeyError",
    "ProviderError",
    "ProviderErrorKind",
    "TokenUsage",
    "get_provider",
]
