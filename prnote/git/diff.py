"""Git diff utilities for pull requests.

Contains:
- setup_git_configuration: Make the checked-out workspace usable by git
- fetch_branches: Fetch the base and head branches from the remote
- get_changed_files: Files changed between base and head, minus ignored ones
- get_diff: The three-dot diff between base and head, minus ignored files
- GitDiffSource: The diff source handed to the updater
"""

import fnmatch
import os
from pathlib import Path
from typing import Optional, Sequence

from prnote.config import DEFAULT_MAX_DIFF_CHARS
from prnote.git.exceptions import NoChangesError
from prnote.git.runner import _run_git_command

DEFAULT_REMOTE = "origin"
TRUNCATION_MARKER = "\n...[truncated]\n"


def _should_exclude_file(filename: str, patterns: Sequence[str]) -> bool:
    """Check if a file should be excluded based on patterns.

    Supports glob patterns like *.lock, build/*, etc.

    Args:
        filename: The file path to check.
        patterns: List of patterns to match against.

    Returns:
        True if the file should be excluded.
    """
    for pattern in patterns:
        # Handle exact matches
        if filename == pattern:
            return True
        # Handle glob patterns
        if fnmatch.fnmatch(filename, pattern):
            return True
        # Handle patterns that might match the basename
        if fnmatch.fnmatch(Path(filename).name, pattern):
            return True
    return False


def _compare_range(base: str, head: str, remote: str = DEFAULT_REMOTE) -> str:
    """Three-dot range: changes on head since it diverged from base."""
    return f"{remote}/{base}...{remote}/{head}"


def truncate_diff(diff: str, max_chars: int = DEFAULT_MAX_DIFF_CHARS) -> str:
    """Cut a diff to max_chars, appending a marker when anything was dropped."""
    if len(diff) > max_chars:
        return diff[:max_chars] + TRUNCATION_MARKER
    return diff


def setup_git_configuration(workspace: Optional[Path] = None) -> None:
    """Mark the workspace as a safe directory for git.

    Runners check out the repository as a different user than the one running
    the action container, which git refuses to operate on otherwise.

    Args:
        workspace: Repository directory. Defaults to $GITHUB_WORKSPACE, then
            the current directory.
    """
    workspace = workspace or Path(os.environ.get("GITHUB_WORKSPACE") or os.getcwd())
    _run_git_command(["config", "--global", "--add", "safe.directory", str(workspace)])


def fetch_branches(base: str, head: str, remote: str = DEFAULT_REMOTE) -> None:
    """Fetch base and head so that remote-tracking refs exist for both.

    Raises:
        GitError: If the fetch fails.
    """
    _run_git_command(["fetch", "--no-tags", remote, base, head])


def get_changed_files(
    base: str,
    head: str,
    ignores: Sequence[str] = (),
    remote: str = DEFAULT_REMOTE,
) -> list[str]:
    """List files changed between base and head.

    Args:
        base: Base branch name.
        head: Head branch name.
        ignores: Glob patterns of files to leave out.
        remote: Remote the branches were fetched from.

    Returns:
        Repository-relative paths in git's order, ignored files removed.
    """
    output = _run_git_command(["diff", "--name-only", _compare_range(base, head, remote)])
    files = [line.strip() for line in output.splitlines() if line.strip()]
    return [f for f in files if not _should_exclude_file(f, ignores)]


def get_diff(
    base: str,
    head: str,
    ignores: Sequence[str] = (),
    max_chars: int = DEFAULT_MAX_DIFF_CHARS,
    remote: str = DEFAULT_REMOTE,
) -> str:
    """Get the pull request diff, excluding ignored files and truncating if necessary.

    Args:
        base: Base branch name.
        head: Head branch name.
        ignores: Glob patterns of files to leave out.
        max_chars: Maximum characters for the diff output.
        remote: Remote the branches were fetched from.

    Returns:
        The unified diff.

    Raises:
        NoChangesError: If nothing but ignored files changed.
    """
    files = get_changed_files(base, head, ignores, remote)
    if not files:
        raise NoChangesError(
            f"No changes to describe between {base} and {head} (after applying ignore patterns)."
        )

    diff = _run_git_command(["diff", _compare_range(base, head, remote), "--"] + files)
    if not diff:
        raise NoChangesError(f"Empty diff between {base} and {head}.")

    return truncate_diff(diff, max_chars)


class GitDiffSource:
    """Diff collection for one pull request run."""

    def __init__(
        self,
        ignores: Sequence[str] = (),
        max_chars: int = DEFAULT_MAX_DIFF_CHARS,
        remote: str = DEFAULT_REMOTE,
        workspace: Optional[Path] = None,
    ):
        self.ignores = list(ignores)
        self.max_chars = max_chars
        self.remote = remote
        self.workspace = workspace

    def prepare(self, base: str, head: str) -> None:
        """Configure git and fetch both branches."""
        setup_git_configuration(self.workspace)
        fetch_branches(base, head, self.remote)

    def get_diff(self, base: str, head: str) -> str:
        return get_diff(base, head, self.ignores, self.max_chars, self.remote)

    def get_changed_files(self, base: str, head: str) -> list[str]:
        return get_changed_files(base, head, self.ignores, self.remote)
