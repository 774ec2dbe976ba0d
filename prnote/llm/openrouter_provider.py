"""OpenRouter provider implementation.

OpenRouter provides unified access to 200+ models through a single API.
It uses an OpenAI-compatible API format.
"""

from openai import OpenAI

from prnote.config import API_KEY_ENV_VARS, LLMProvider
from prnote.llm.openai_provider import OpenAIProvider

# OpenRouter API base URL
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter LLM provider (unified access to 200+ models)."""

    name = "OpenRouter"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.OPENROUTER]

    def _create_client(self, api_key: str):
        return OpenAI(api_key=api_key, base_url=OPENROUTER_BASE_URL)
