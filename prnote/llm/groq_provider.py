"""Groq provider implementation.

Groq responses follow the OpenAI chat-completions shape, so only the client
differs from OpenAIProvider.
"""

from groq import Groq

from prnote.config import API_KEY_ENV_VARS, LLMProvider
from prnote.llm.openai_provider import OpenAIProvider


class GroqProvider(OpenAIProvider):
    """Groq LLM provider."""

    name = "Groq"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.GROQ]

    def _create_client(self, api_key: str):
        return Groq(api_key=api_key)
