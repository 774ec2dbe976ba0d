"""LLM-related exception classes.

Contains all exception classes for LLM operations:
- LLMError: Base exception for LLM-related errors
- MissingAPIKeyError: Raised when API key is not set
- ProviderError: A provider failure normalized into a closed set of kinds
"""

import re
from enum import Enum
from typing import Optional


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class MissingAPIKeyError(LLMError):
    """Raised when the required API key is not set."""

    pass


class ProviderErrorKind(Enum):
    """Closed classification of provider failures."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT_UNAVAILABLE = "transient_unavailable"
    EXHAUSTED = "exhausted"
    FATAL = "fatal"


# Kinds the orchestrator recovers from by retrying
RETRYABLE_KINDS = frozenset({ProviderErrorKind.RATE_LIMITED, ProviderErrorKind.TRANSIENT_UNAVAILABLE})

_RATE_LIMIT_PATTERN = re.compile(r"\b429\b|rate.?limit|resource.?exhausted|too many requests|quota", re.IGNORECASE)
_UNAVAILABLE_PATTERN = re.compile(r"\b50[34]\b|\b529\b|unavailable|overloaded|try again later", re.IGNORECASE)


class ProviderError(LLMError):
    """Raised when a provider call fails.

    Attributes:
        kind: The normalized failure kind.
        status_code: HTTP status reported by the backend, if any.
        provider: Human-readable provider name.
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        status_code: Optional[int] = None,
        provider: str = "",
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.provider = provider

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


def _extract_status_code(error: BaseException) -> Optional[int]:
    """Find an HTTP status on an SDK exception.

    The SDKs disagree on the attribute name: openai, anthropic, groq and
    cohere use `status_code`, google-genai uses `code`.
    """
    for attr in ("status_code", "code", "http_status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def classify_error(error: BaseException, provider: str = "") -> ProviderError:
    """Normalize any exception raised by a provider SDK into a ProviderError.

    Args:
        error: The exception caught at the adapter boundary.
        provider: Human-readable provider name for the message.

    Returns:
        A ProviderError with kind RATE_LIMITED, TRANSIENT_UNAVAILABLE or FATAL.
    """
    if isinstance(error, ProviderError):
        return error

    status_code = _extract_status_code(error)
    message = str(error) or error.__class__.__name__
    prefix = f"{provider} API call failed: " if provider else ""

    if status_code == 429:
        kind = ProviderErrorKind.RATE_LIMITED
    elif status_code in (503, 529):
        kind = ProviderErrorKind.TRANSIENT_UNAVAILABLE
    elif status_code is not None and status_code < 500:
        kind = ProviderErrorKind.FATAL
    elif _RATE_LIMIT_PATTERN.search(message):
        kind = ProviderErrorKind.RATE_LIMITED
    elif _UNAVAILABLE_PATTERN.search(message):
        kind = ProviderErrorKind.TRANSIENT_UNAVAILABLE
    else:
        kind = ProviderErrorKind.FATAL

    return ProviderError(kind, f"{prefix}{message}", status_code=status_code, provider=provider)
