"""GitHub integration for prnote.

This package provides:
- exceptions: ContextError, ContextErrorKind, PublishError, PublishErrorKind
- context: PullRequestContext, load_context, validate_context
- client: PullRequestClient
"""

from prnote.github.client import PullRequestClient
from prnote.github.context import (
    PULL_REQUEST_EVENTS,
    PullRequestContext,
    load_context,
    validate_context,
)
from prnote.github.exceptions import (
    ContextError,
    ContextErrorKind,
    PublishError,
    PublishErrorKind,
    publish_error_kind,
)


__all__ = [
    "ContextError",
    "ContextErrorKind",
    "PULL_REQUEST_EVENTS",
    "PublishError",
    "PublishErrorKind",
    "PullRequestClient",
    "PullRequestContext",
    "load_context",
    "publish_error_kind",
    "validate_context",
]
