"""Workflow event context.

Reads the environment GitHub Actions provides to every step:
GITHUB_EVENT_NAME, GITHUB_EVENT_PATH (the webhook payload as JSON) and
GITHUB_REPOSITORY ("owner/name").
"""

import json
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from prnote.github.exceptions import ContextError, ContextErrorKind

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


@dataclass(frozen=True)
class PullRequestContext:
    """The pull request a run was triggered for."""

    event_name: str
    repository: str = ""
    number: Optional[int] = None
    author: str = ""
    base_ref: str = ""
    head_ref: str = ""
    title: str = ""
    body: str = ""

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @classmethod
    def from_event(cls, event_name: str, payload: dict, repository: str = "") -> "PullRequestContext":
        """Build a context from a webhook payload.

        Args:
            event_name: The triggering event.
            payload: Decoded webhook payload.
            repository: "owner/name"; read from the payload when empty.

        Returns:
            The context. PR fields stay empty when the payload has no
            pull_request object.
        """
        pull_request = payload.get("pull_request") or {}
        if not repository:
            repository = (payload.get("repository") or {}).get("full_name", "")

        return cls(
            event_name=event_name,
            repository=repository,
            number=pull_request.get("number"),
            author=(pull_request.get("user") or {}).get("login", ""),
            base_ref=(pull_request.get("base") or {}).get("ref", ""),
            head_ref=(pull_request.get("head") or {}).get("ref", ""),
            title=pull_request.get("title") or "",
            body=pull_request.get("body") or "",
        )


def load_context(environ: Optional[Mapping[str, str]] = None) -> PullRequestContext:
    """Load the event context from the Actions environment.

    The payload is only read for pull request events; any other event yields
    a bare context that validate_context rejects.

    Args:
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        The PullRequestContext.

    Raises:
        ContextError: MISSING_PAYLOAD if the event file is absent or unreadable.
    """
    environ = os.environ if environ is None else environ
    event_name = environ.get("GITHUB_EVENT_NAME", "")
    repository = environ.get("GITHUB_REPOSITORY", "")

    if event_name not in PULL_REQUEST_EVENTS:
        return PullRequestContext(event_name=event_name, repository=repository)

    event_path = environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise ContextError(ContextErrorKind.MISSING_PAYLOAD, "GITHUB_EVENT_PATH is not set.")

    try:
        with open(event_path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ContextError(
            ContextErrorKind.MISSING_PAYLOAD, f"Cannot read event payload {event_path}: {e}"
        ) from e

    return PullRequestContext.from_event(event_name, payload, repository)


def validate_context(context: PullRequestContext) -> None:
    """Check that a run can proceed for this context.

    Raises:
        ContextError: WRONG_EVENT for anything but a pull request event,
            MISSING_PAYLOAD when the pull request fields are incomplete.
    """
    if context.event_name not in PULL_REQUEST_EVENTS:
        raise ContextError(
            ContextErrorKind.WRONG_EVENT,
            f"This action only runs on pull request events, got '{context.event_name or 'unknown'}'.",
        )

    missing = [
        name
        for name, value in (
            ("number", context.number),
            ("repository", context.owner and context.repo),
            ("base ref", context.base_ref),
            ("head ref", context.head_ref),
        )
        if not value
    ]
    if missing:
        raise ContextError(
            ContextErrorKind.MISSING_PAYLOAD,
            f"Pull request payload is missing: {', '.join(missing)}.",
        )
