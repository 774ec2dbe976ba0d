"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of the current git repository
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from prnote.git.exceptions import GitError

logger = logging.getLogger(__name__)


def _run_git_command(args: list[str], cwd: Optional[Path] = None) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run in. Defaults to the current directory.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails.
    """
    logger.debug(f"git {' '.join(args)}")
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr.strip()}") from e
    except FileNotFoundError as e:
        raise GitError("Git is not installed or not in PATH.") from e


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the current git repository.

    Returns:
        Path to the repository root.

    Raises:
        GitError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd)
    except GitError as e:
        raise GitError("Not in a git repository. Did the workflow run actions/checkout?") from e
    return Path(root)
