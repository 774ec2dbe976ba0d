"""Commit type inference for prnote.

Infers a conventional commit type with a weighted score per type instead of
a first-match rule list, so mixed changes resolve to their dominant intent.
Points come from:
- the category of each changed file (ci, build, docs, test, style, source)
- fix/refactor/perf keywords in the title, the AI subject and the diff
- workspace signals (monorepo manifests, many new files), which favor feat
"""

import re
from pathlib import PurePosixPath
from typing import Optional

from prnote.scope import is_docs_file, is_test_file, normalize_path
from prnote.styles.constants import (
    BUILD_FILES,
    BUILD_PREFIXES,
    CI_PATTERNS,
    DEFAULT_TYPE,
    DIFF_KEYWORD_CAP,
    DIFF_KEYWORD_WEIGHT,
    FILE_WEIGHTS,
    KEYWORDS,
    NEW_FILES_FOR_WORKSPACE,
    SOURCE_EXTENSIONS,
    STYLE_EXTENSIONS,
    TITLE_KEYWORD_WEIGHT,
    TYPE_PRECEDENCE,
    WORKSPACE_BONUS,
    WORKSPACE_MANIFESTS,
)

_KEYWORD_PATTERNS = {
    commit_type: re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b", re.IGNORECASE)
    for commit_type, words in KEYWORDS.items()
}

_CARGO_WORKSPACE = re.compile(r"^\+\s*\[workspace\]", re.MULTILINE)
_NPM_WORKSPACES = re.compile(r'^\+\s*"workspaces"\s*:', re.MULTILINE)
_NEW_FILE = re.compile(r"^new file mode", re.MULTILINE)


def classify_file(path: str) -> Optional[str]:
    """Classify a changed file into the commit type it suggests.

    Args:
        path: Repository-relative file path.

    Returns:
        "ci", "build", "docs", "test", "style", "feat" (general source code)
        or None when the file carries no signal.
    """
    normalized = normalize_path(path)
    lower = normalized.lower()
    name = PurePosixPath(lower).name
    suffix = PurePosixPath(lower).suffix

    # CI before build, since CI files often match build patterns
    if any(pattern in lower for pattern in CI_PATTERNS):
        return "ci"
    if name in BUILD_FILES or name.startswith(BUILD_PREFIXES):
        return "build"
    if is_docs_file(normalized):
        return "docs"
    if is_test_file(normalized):
        return "test"
    if suffix in STYLE_EXTENSIONS:
        return "style"
    if suffix in SOURCE_EXTENSIONS:
        return "feat"
    return None


def _changed_lines(diff_text: str) -> str:
    """Added and removed lines of a unified diff, without file headers."""
    lines = []
    for line in diff_text.splitlines():
        if line.startswith(("+++", "---")):
            continue
        if line.startswith(("+", "-")):
            lines.append(line[1:])
    return "\n".join(lines)


def has_workspace_signal(diff_text: str, changed_files: list[str]) -> bool:
    """Check whether a change looks like monorepo/workspace restructuring.

    Args:
        diff_text: The unified diff.
        changed_files: Changed file paths.

    Returns:
        True for workspace manifests, new Cargo/npm workspaces, or at least
        NEW_FILES_FOR_WORKSPACE newly created files.
    """
    names = {PurePosixPath(normalize_path(f).lower()).name for f in changed_files}
    if names & WORKSPACE_MANIFESTS:
        return True
    if _CARGO_WORKSPACE.search(diff_text) or _NPM_WORKSPACES.search(diff_text):
        return True
    return len(_NEW_FILE.findall(diff_text)) >= NEW_FILES_FOR_WORKSPACE


def score_commit_types(
    diff_text: str,
    changed_files: list[str],
    current_title: str = "",
    subject: str = "",
) -> dict[str, float]:
    """Score every commit type for a change.

    Args:
        diff_text: The unified diff.
        changed_files: Changed file paths.
        current_title: The pull request's current title.
        subject: The subject proposed by the AI.

    Returns:
        Mapping of commit type to score, including zero scores.
    """
    scores = {commit_type: 0.0 for commit_type in TYPE_PRECEDENCE}
    diff_text = diff_text or ""

    for path in changed_files:
        category = classify_file(path)
        if category:
            scores[category] += FILE_WEIGHTS[category]

    title_text = f"{current_title or ''}\n{subject or ''}"
    changed = _changed_lines(diff_text)
    for commit_type, pattern in _KEYWORD_PATTERNS.items():
        if pattern.search(title_text):
            scores[commit_type] += TITLE_KEYWORD_WEIGHT
        hits = len(pattern.findall(changed))
        scores[commit_type] += min(hits * DIFF_KEYWORD_WEIGHT, DIFF_KEYWORD_CAP)

    # Large structural changes are rarely pure bug fixes
    if has_workspace_signal(diff_text, changed_files):
        scores["feat"] += WORKSPACE_BONUS

    return scores


def infer_commit_type(
    diff_text: str,
    changed_files: list[str],
    current_title: str = "",
    subject: str = "",
) -> str:
    """Infer the conventional commit type for a change.

    Args:
        diff_text: The unified diff.
        changed_files: Changed file paths.
        current_title: The pull request's current title.
        subject: The subject proposed by the AI.

    Returns:
        The highest scoring type; ties go to the type listed first in
        TYPE_PRECEDENCE. "chore" when nothing scores, or "feat" if a
        source file changed.
    """
    scores = score_commit_types(diff_text, changed_files, current_title, subject)
    best = max(scores.values())

    if best <= 0:
        if any(classify_file(f) == "feat" for f in changed_files):
            return "feat"
        return DEFAULT_TYPE

    for commit_type in TYPE_PRECEDENCE:
        if scores[commit_type] == best:
            return commit_type
    return DEFAULT_TYPE
