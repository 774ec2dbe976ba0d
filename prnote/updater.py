"""Pull request updater.

Drives one run end to end:

    INIT -> CONTEXT_VALIDATED -> DIFF_COLLECTED -> DESCRIPTION_GENERATED
         -> [TITLE_GENERATED] -> PUBLISHED -> DONE

Any failure moves the run to FAILED. There is no partial success: either the
pull request is updated or the run fails with the cause.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from prnote.config import ActionConfig
from prnote.git.exceptions import GitError
from prnote.github.context import PullRequestContext, validate_context
from prnote.github.exceptions import ContextError, PublishError
from prnote.llm.base import GenerationRequest
from prnote.llm.exceptions import LLMError
from prnote.llm.orchestrator import GenerationOrchestrator
from prnote.llm.prompts import (
    SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
    build_description_prompt,
    build_title_prompt,
)
from prnote.scope import ScopeConfig
from prnote.styles.title import synthesize_title

BACKUP_COMMENT_TEMPLATE = "**Original description**:\n\n{body}"


class RunState(Enum):
    """States of a pull request update run."""

    INIT = "init"
    CONTEXT_VALIDATED = "context_validated"
    DIFF_COLLECTED = "diff_collected"
    DESCRIPTION_GENERATED = "description_generated"
    TITLE_GENERATED = "title_generated"
    PUBLISHED = "published"
    DONE = "done"
    FAILED = "failed"


class UpdaterError(Exception):
    """A run failed after its context was validated."""

    def __init__(self, state: RunState, cause: Exception):
        super().__init__(f"Failed after {state.value}: {cause}")
        self.state = state
        self.cause = cause


@dataclass(frozen=True)
class RunOutcome:
    """What a successful run produced."""

    pr_number: int
    description: str
    title: Optional[str] = None


class DiffSource(Protocol):
    def prepare(self, base: str, head: str) -> None: ...

    def get_diff(self, base: str, head: str) -> str: ...

    def get_changed_files(self, base: str, head: str) -> list[str]: ...


class PullRequestClientProtocol(Protocol):
    def get_pull_request(self, number: int) -> dict: ...

    def create_comment(self, number: int, body: str) -> dict: ...

    def update_pull_request(
        self, number: int, body: Optional[str] = None, title: Optional[str] = None
    ) -> dict: ...


class PullRequestUpdater:
    """Generates and publishes the description (and title) of one pull request."""

    def __init__(
        self,
        config: ActionConfig,
        context: PullRequestContext,
        diff_source: DiffSource,
        orchestrator: GenerationOrchestrator,
        pr_client: PullRequestClientProtocol,
        logger: Optional[logging.Logger] = None,
        scope_config: Optional[ScopeConfig] = None,
    ):
        self.config = config
        self.context = context
        self.diff_source = diff_source
        self.orchestrator = orchestrator
        self.pr_client = pr_client
        self.logger = logger or logging.getLogger(__name__)
        self.scope_config = scope_config

        self.state = RunState.INIT
        self.history: list[RunState] = [RunState.INIT]

    def _transition(self, state: RunState) -> None:
        self.logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def run(self) -> RunOutcome:
        """Execute the run.

        Returns:
            The pull request number, the description and the title (None when
            title updates are off).

        Raises:
            ContextError: If the event is not a usable pull request event.
                Raised before any git or network call.
            UpdaterError: If a later step fails; carries the last state reached.
        """
        try:
            validate_context(self.context)
        except ContextError:
            self._transition(RunState.FAILED)
            raise
        self._transition(RunState.CONTEXT_VALIDATED)

        try:
            return self._run_validated()
        except (GitError, LLMError, PublishError) as e:
            failed_at = self.state
            self._transition(RunState.FAILED)
            raise UpdaterError(failed_at, e) from e

    def _run_validated(self) -> RunOutcome:
        number = self.context.number
        base, head = self.context.base_ref, self.context.head_ref
        self.logger.info(f"Describing pull request #{number} ({head} -> {base})")

        self.diff_source.prepare(base, head)
        diff = self.diff_source.get_diff(base, head)
        changed_files = self.diff_source.get_changed_files(base, head)
        self.logger.info(f"Collected diff of {len(diff)} chars across {len(changed_files)} files")
        self._transition(RunState.DIFF_COLLECTED)

        description = self.generate_description(diff)
        self._transition(RunState.DESCRIPTION_GENERATED)

        title = None
        if self.config.update_title:
            title = self.generate_title(diff, changed_files)
            self._transition(RunState.TITLE_GENERATED)

        self.publish(number, description, title)
        self._transition(RunState.PUBLISHED)

        self._transition(RunState.DONE)
        return RunOutcome(pr_number=number, description=description, title=title)

    def _request(self, prompt: str, system_instruction: str) -> GenerationRequest:
        return GenerationRequest(
            prompt=prompt,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            model_name=self.config.resolved_model,
            system_instruction=system_instruction,
        )

    def generate_description(self, diff: str) -> str:
        """Ask the model for the Markdown description of a diff."""
        prompt = build_description_prompt(diff, self.context.author)
        result = self.orchestrator.generate(self._request(prompt, SYSTEM_PROMPT), self.logger)
        if not result.text:
            self.logger.warning("The model returned an empty description")
        return result.text

    def generate_title(self, diff: str, changed_files: list[str]) -> str:
        """Ask the model for a title and turn it into a conventional one."""
        prompt = build_title_prompt(diff, self.context.title)
        result = self.orchestrator.generate(self._request(prompt, TITLE_SYSTEM_PROMPT), self.logger)
        title = synthesize_title(
            result.text,
            diff,
            changed_files,
            current_title=self.context.title,
            scope_config=self.scope_config,
        )
        self.logger.info(f"Generated title: {title}")
        return title

    def publish(self, number: int, description: str, title: Optional[str] = None) -> None:
        """Back up the current description as a comment, then update the pull request.

        The backup comment stays even if the update fails.
        """
        pull_request = self.pr_client.get_pull_request(number)
        current_body = pull_request.get("body") or ""

        if current_body:
            self.logger.info("Saving the original description as a comment")
            self.pr_client.create_comment(number, BACKUP_COMMENT_TEMPLATE.format(body=current_body))

        self.pr_client.update_pull_request(number, body=description, title=title or None)
        self.logger.info(f"Updated pull request #{number}")
