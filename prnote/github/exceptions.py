"""GitHub-related exception classes.

Contains:
- ContextError: The workflow event cannot be handled
- PublishError: A pull request API call failed
"""

from enum import Enum
from typing import Optional


class ContextErrorKind(Enum):
    """Why the event context was rejected."""

    WRONG_EVENT = "wrong_event"
    MISSING_PAYLOAD = "missing_payload"


class ContextError(Exception):
    """Raised when the run was not triggered by a usable pull request event."""

    def __init__(self, kind: ContextErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class PublishErrorKind(Enum):
    """Classification of a failed pull request API call."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    OTHER = "other"


class PublishError(Exception):
    """Raised when reading or updating the pull request fails."""

    def __init__(self, kind: PublishErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def publish_error_kind(status_code: Optional[int]) -> PublishErrorKind:
    """Map an HTTP status to a PublishErrorKind."""
    if status_code == 404:
        return PublishErrorKind.NOT_FOUND
    if status_code in (401, 403):
        return PublishErrorKind.FORBIDDEN
    return PublishErrorKind.OTHER
