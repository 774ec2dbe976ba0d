"""Git diff source for prnote.

This package provides:
- exceptions: GitError, NoChangesError
- runner: _run_git_command, get_repo_root
- diff: setup_git_configuration, fetch_branches, get_changed_files, get_diff,
        truncate_diff, _should_exclude_file, GitDiffSource
"""

# Exceptions
from prnote.git.exceptions import (
    GitError,
    NoChangesError,
)

# Runner utilities
from prnote.git.runner import (
    _run_git_command,
    get_repo_root,
)

# Diff utilities
from prnote.git.diff import (
    GitDiffSource,
    TRUNCATION_MARKER,
    _should_exclude_file,
    fetch_branches,
    get_changed_files,
    get_diff,
    setup_git_configuration,
    truncate_diff,
)


__all__ = [
    # Exceptions
    "GitError",
    "NoChangesError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Diff
    "GitDiffSource",
    "TRUNCATION_MARKER",
    "_should_exclude_file",
    "fetch_branches",
    "get_changed_files",
    "get_diff",
    "setup_git_configuration",
    "truncate_diff",
]
