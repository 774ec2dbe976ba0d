"""Git-related exception classes.

Contains all exception classes for Git operations:
- GitError: Base exception for git-related errors
- NoChangesError: Raised when the compared branches have nothing to describe
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    pass


class NoChangesError(GitError):
    """Raised when no (non-ignored) file differs between base and head."""

    pass
