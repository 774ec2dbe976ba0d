"""Configuration for prnote.

Holds the provider registry, the tunable generation constants and the
validated configuration model built from the action inputs.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the action configuration is invalid."""

    pass


class LLMProvider(Enum):
    """Supported LLM providers."""

    GOOGLE = "google"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GROQ = "groq"
    COHERE = "cohere"
    OPENROUTER = "openrouter"


# Names accepted for the `ai_name` input
PROVIDER_ALIASES = {
    "gemini": LLMProvider.GOOGLE,
    "google": LLMProvider.GOOGLE,
    "openai": LLMProvider.OPENAI,
    "open-ai": LLMProvider.OPENAI,
    "anthropic": LLMProvider.ANTHROPIC,
    "claude": LLMProvider.ANTHROPIC,
    "groq": LLMProvider.GROQ,
    "cohere": LLMProvider.COHERE,
    "openrouter": LLMProvider.OPENROUTER,
}


# ============================================================
# DEFAULT VALUES
# ============================================================

DEFAULT_PROVIDER = LLMProvider.GOOGLE
DEFAULT_TEMPERATURE = 0.8
DEFAULT_MAX_OUTPUT_TOKENS = 2048
DEFAULT_MAX_DIFF_CHARS = 60000

# No request is ever sent with a smaller output budget than this
MIN_OUTPUT_TOKENS = 768

# Hard cap for generated titles
MAX_TITLE_LENGTH = 72


# ============================================================
# MODELS PER PROVIDER
# ============================================================

DEFAULT_MODELS = {
    LLMProvider.GOOGLE: "gemini-2.5-pro",
    LLMProvider.OPENAI: "gpt-4.1",
    LLMProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    LLMProvider.GROQ: "llama-3.3-70b-versatile",
    LLMProvider.COHERE: "command-r-plus",
    LLMProvider.OPENROUTER: "anthropic/claude-sonnet-4",
}

# Fallback ladder tails, tried in order after the requested model
FALLBACK_MODELS = {
    LLMProvider.GOOGLE: [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
    ],
    LLMProvider.OPENAI: [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o-mini",
    ],
    LLMProvider.ANTHROPIC: [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-latest",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.COHERE: [
        "command-r-plus",
        "command-r",
    ],
    LLMProvider.OPENROUTER: [
        "anthropic/claude-sonnet-4",
        "openai/gpt-4o",
        "google/gemini-2.0-flash-exp",
    ],
}

API_KEY_ENV_VARS = {
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
    LLMProvider.COHERE: "COHERE_API_KEY",
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
}


def parse_provider(value: Any) -> LLMProvider:
    """Resolve a provider name or alias to an LLMProvider.

    Args:
        value: An LLMProvider or a provider name such as "gemini" or "open-ai".

    Returns:
        The matching LLMProvider.

    Raises:
        ValueError: If the name is not recognized.
    """
    if isinstance(value, LLMProvider):
        return value
    name = str(value or "").strip().lower()
    if not name:
        return DEFAULT_PROVIDER
    if name not in PROVIDER_ALIASES:
        valid = ", ".join(sorted(PROVIDER_ALIASES))
        raise ValueError(f"Unsupported provider '{value}'. Valid names: {valid}")
    return PROVIDER_ALIASES[name]


def clamp_max_output_tokens(value: Any, default: int = DEFAULT_MAX_OUTPUT_TOKENS) -> int:
    """Coerce an output token budget and apply the MIN_OUTPUT_TOKENS floor.

    Non-numeric values fall back to the default; negative and small values
    are raised to the floor.

    Args:
        value: The raw budget (int, float, numeric string or garbage).
        default: Budget used when the value cannot be read as a number.

    Returns:
        A budget of at least MIN_OUTPUT_TOKENS.
    """
    if value is None or isinstance(value, bool):
        tokens = default
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            number = float(default)
        tokens = int(number) if math.isfinite(number) else default
    return max(MIN_OUTPUT_TOKENS, tokens)


@dataclass(frozen=True)
class RetryPolicy:
    """Tunables for the generation orchestrator."""

    max_attempts: int = 100
    backoff_base: float = 1.0
    backoff_cap: float = 30.0
    jitter_max: float = 1.0
    # Consecutive 503-style failures tolerated before moving down the model ladder
    switch_threshold: int = 10
    empty_retry_multiplier: float = 1.5


class ActionConfig(BaseModel):
    """Validated run configuration assembled from the action inputs."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    provider: LLMProvider = DEFAULT_PROVIDER
    api_key: str = Field(min_length=1)
    github_token: str = ""
    temperature: float = Field(DEFAULT_TEMPERATURE, ge=0.0, le=1.0)
    model: Optional[str] = None
    fallback_models: tuple[str, ...] = ()
    ignores: tuple[str, ...] = ()
    update_title: bool = False
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    max_diff_chars: int = Field(DEFAULT_MAX_DIFF_CHARS, gt=0)

    @field_validator("provider", mode="before")
    @classmethod
    def _parse_provider(cls, v):
        return parse_provider(v)

    @field_validator("model", mode="before")
    @classmethod
    def _blank_model_is_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("ignores", "fallback_models", mode="before")
    @classmethod
    def _split_comma_list(cls, v):
        """Accept either a comma-separated string or a sequence."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        return tuple(item.strip() for item in v if item and item.strip())

    @field_validator("update_title", mode="before")
    @classmethod
    def _parse_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return bool(v)

    @field_validator("temperature", mode="before")
    @classmethod
    def _blank_temperature_is_default(cls, v):
        if isinstance(v, str) and not v.strip():
            return DEFAULT_TEMPERATURE
        return v

    @field_validator("max_output_tokens", mode="before")
    @classmethod
    def _clamp_tokens(cls, v):
        return clamp_max_output_tokens(v)

    @property
    def resolved_model(self) -> str:
        """The requested model, or the provider default."""
        return self.model or DEFAULT_MODELS[self.provider]

    @property
    def resolved_fallback_models(self) -> list[str]:
        """Configured fallback models, or the provider's built-in ladder."""
        if self.fallback_models:
            return list(self.fallback_models)
        return list(FALLBACK_MODELS[self.provider])


def load_action_config(**values: Any) -> ActionConfig:
    """Build an ActionConfig, converting validation failures to ConfigError.

    Args:
        **values: Field values; None entries are treated as unset.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If a value is missing, unknown or out of range.
    """
    provided = {key: value for key, value in values.items() if value is not None}
    try:
        return ActionConfig(**provided)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
