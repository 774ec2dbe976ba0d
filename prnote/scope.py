"""Scope inference for prnote.

Provides deterministic scope inference from changed files so generated
titles get accurate scopes like feat(api), fix(web) or ci: ...

Paths are grouped by their leading segment, with special handling for CI
directories, files at the repository root, monorepo containers such as
apps/ and packages/, and generic source roots such as src/. When a change is
spread too widely for a single group to describe it, the catch-all
"monorepo" scope is used instead of a misleadingly narrow one.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional


# Directories holding CI configuration
DEFAULT_CI_DIRECTORIES = {
    ".github",
    ".circleci",
    ".gitlab",
    ".buildkite",
}

# Directories whose immediate children are the real units of a monorepo
DEFAULT_MONOREPO_ROOTS = [
    "apps",
    "applications",
    "packages",
    "libs",
    "modules",
    "services",
    "plugins",
    "workspaces",
]

# Leading segments that say nothing about the area of change
DEFAULT_GENERIC_SEGMENTS = {
    "src",
    "lib",
    "source",
    "sources",
}

# Pairs of areas that, touched together, make any single scope misleading
DEFAULT_CONFLICTING_AREAS = [
    ({"apps", "applications"}, {"packages"}),
    ({"backend"}, {"frontend"}),
]

ROOT_GROUP = "root"
ROOT_SCOPE = "repo"
CI_SCOPE = "ci"
MONOREPO_SCOPE = "monorepo"


@dataclass
class ScopeConfig:
    """Configuration for scope inference."""

    enabled: bool = True
    dominant_threshold: float = 0.5  # Fraction of files the top group must cover
    max_top_level_groups: int = 3

    # Explicit path-prefix to scope mapping, checked before grouping
    mapping: dict[str, str] = field(default_factory=dict)

    monorepo_roots: list[str] = field(default_factory=lambda: DEFAULT_MONOREPO_ROOTS.copy())
    ci_directories: set[str] = field(default_factory=lambda: DEFAULT_CI_DIRECTORIES.copy())
    generic_segments: set[str] = field(default_factory=lambda: DEFAULT_GENERIC_SEGMENTS.copy())


@dataclass
class ScopeResult:
    """Result of scope inference."""

    scope: Optional[str]
    confidence: float  # 0.0 to 1.0
    candidates: list[tuple[str, int]]  # List of (group, file_count) candidates
    reason: str  # Human-readable explanation


def normalize_path(path: str) -> str:
    """Normalize a file path for consistent processing.

    Args:
        path: The file path to normalize.

    Returns:
        Normalized path with forward slashes.
    """
    return path.replace("\\", "/").strip("/")


def is_docs_file(path: str) -> bool:
    """Check if a file is a documentation file.

    Args:
        path: The file path.

    Returns:
        True if the file is a documentation file.
    """
    normalized = normalize_path(path).lower()

    # Check extension
    doc_extensions = {".md", ".rst", ".txt", ".adoc", ".asciidoc", ".mdx"}
    if any(normalized.endswith(ext) for ext in doc_extensions):
        return True

    # Check directory
    doc_dirs = {"docs", "doc", "documentation", "wiki"}
    parts = normalized.split("/")
    return any(part in doc_dirs for part in parts[:-1])


def is_test_file(path: str) -> bool:
    """Check if a file is a test file.

    Args:
        path: The file path.

    Returns:
        True if the file is a test file.
    """
    normalized = normalize_path(path).lower()
    name = normalized.rsplit("/", 1)[-1]

    if name.startswith("test_") or name == "conftest.py":
        return True

    test_patterns = [
        "_test.",
        ".test.",
        ".spec.",
        "_spec.",
    ]
    if any(pattern in name for pattern in test_patterns):
        return True

    test_dirs = {"tests", "test", "spec", "specs", "__tests__", "e2e"}
    return any(part in test_dirs for part in normalized.split("/")[:-1])


def _scope_group(path: str, config: ScopeConfig) -> tuple[str, str]:
    """Return (top-level area, scope group) for a changed file."""
    parts = normalize_path(path).split("/")
    if len(parts) == 1:
        return ROOT_GROUP, ROOT_GROUP

    top = parts[0]
    if top in config.ci_directories:
        return top, CI_SCOPE

    # Containers and generic roots only name a scope through their child
    # directory; a file directly inside them belongs to the container itself
    if len(parts) > 2 and (top in config.monorepo_roots or top.lower() in config.generic_segments):
        return top, parts[1]

    return top, top


def _match_mapping(path: str, mapping: dict[str, str]) -> Optional[str]:
    normalized = normalize_path(path)
    for prefix, scope in mapping.items():
        if normalized.startswith(normalize_path(prefix)):
            return scope
    return None


def _monorepo_reason(
    files: list[str],
    group_counts: Counter,
    top_counts: Counter,
    container_children: dict[str, set[str]],
    config: ScopeConfig,
) -> Optional[str]:
    """Explain why the change is too broad for one scope, or None."""
    top_group, top_count = group_counts.most_common(1)[0]

    if top_count / len(files) < config.dominant_threshold:
        return f"Top group '{top_group}' covers only {top_count}/{len(files)} files"

    if len(top_counts) > config.max_top_level_groups:
        return f"{len(top_counts)} top-level areas touched"

    touched = set(top_counts)
    for left, right in DEFAULT_CONFLICTING_AREAS:
        if touched & left and touched & right:
            return f"Both {'/'.join(sorted(touched & left))} and {'/'.join(sorted(touched & right))} touched"

    for container, children in container_children.items():
        if len(children) > 1:
            return f"{len(children)} areas under {container}/ touched"

    return None


def infer_scope(
    files: list[str],
    config: ScopeConfig | None = None,
) -> ScopeResult:
    """Infer scope from changed files.

    Args:
        files: List of changed file paths.
        config: Scope inference configuration.

    Returns:
        ScopeResult with inferred scope or None scope.
    """
    if config is None:
        config = ScopeConfig()

    if not config.enabled:
        return ScopeResult(
            scope=None,
            confidence=1.0,
            candidates=[],
            reason="Scope inference disabled",
        )

    if not files:
        return ScopeResult(
            scope=None,
            confidence=1.0,
            candidates=[],
            reason="No files to analyze",
        )

    if config.mapping:
        mapped = Counter(_match_mapping(f, config.mapping) for f in files)
        mapped_scope, mapped_count = mapped.most_common(1)[0]
        if mapped_scope and mapped_count == len(files):
            return ScopeResult(
                scope=mapped_scope,
                confidence=1.0,
                candidates=[(mapped_scope, mapped_count)],
                reason=f"Matched {mapped_count}/{len(files)} files via mapping",
            )

    group_counts: Counter[str] = Counter()
    top_counts: Counter[str] = Counter()
    container_children: dict[str, set[str]] = {}

    for file_path in files:
        top, group = _scope_group(file_path, config)
        group_counts[group] += 1
        top_counts[top] += 1
        if top in config.monorepo_roots and group != top:
            container_children.setdefault(top, set()).add(group)

    most_common = group_counts.most_common()
    top_group, top_count = most_common[0]
    confidence = top_count / len(files)

    broad_reason = _monorepo_reason(files, group_counts, top_counts, container_children, config)
    if broad_reason:
        return ScopeResult(
            scope=MONOREPO_SCOPE,
            confidence=confidence,
            candidates=most_common,
            reason=broad_reason,
        )

    scope = ROOT_SCOPE if top_group == ROOT_GROUP else top_group
    return ScopeResult(
        scope=scope,
        confidence=confidence,
        candidates=most_common,
        reason=f"Group '{top_group}' covers {top_count}/{len(files)} files",
    )


def load_scope_config_from_dict(config_dict: dict) -> ScopeConfig:
    """Load ScopeConfig from a configuration dictionary.

    Args:
        config_dict: Dictionary with an optional "scope" section.

    Returns:
        ScopeConfig instance.
    """
    scope_section = config_dict.get("scope") or {}

    return ScopeConfig(
        enabled=scope_section.get("enabled", True),
        dominant_threshold=scope_section.get("dominant_threshold", 0.5),
        max_top_level_groups=scope_section.get("max_top_level_groups", 3),
        mapping=scope_section.get("mapping") or {},
        monorepo_roots=scope_section.get("monorepo_roots", DEFAULT_MONOREPO_ROOTS.copy()),
        ci_directories=set(scope_section.get("ci_directories", DEFAULT_CI_DIRECTORIES)),
        generic_segments=set(scope_section.get("generic_segments", DEFAULT_GENERIC_SEGMENTS)),
    )
