"""Repository configuration for prnote.

Reads the optional .github/prnote.yaml file of the repository being
described. Action inputs always take precedence over this file.

Example:

    ignore:
      - "*.snap"
      - "fixtures/*"
    fallback_models:
      - gemini-2.5-flash
    scope:
      monorepo_roots: [apps, packages]
"""

from pathlib import Path

import yaml

from prnote.config import ConfigError
from prnote.scope import ScopeConfig, load_scope_config_from_dict


# Default configuration values
DEFAULT_CONFIG = {
    "ignore": [
        # Lock files (auto-generated dependency files)
        "poetry.lock",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "Cargo.lock",
        "Gemfile.lock",
        "composer.lock",
        "go.sum",
        "uv.lock",
        # Build artifacts
        "*.min.js",
        "*.min.css",
        "*.map",
    ],
    "fallback_models": [],
}

CONFIG_FILE_NAMES = ["prnote.yaml", "prnote.yml"]


def get_config_file(repo_root: Path) -> Path:
    """Return path to the repository config file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to .github/prnote.yaml (or .yml if only that exists).
    """
    github_dir = repo_root / ".github"
    for name in CONFIG_FILE_NAMES:
        candidate = github_dir / name
        if candidate.exists():
            return candidate
    return github_dir / CONFIG_FILE_NAMES[0]


def load_config(repo_root: Path) -> dict:
    """Load the prnote configuration merged over the defaults.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Configuration dictionary.

    Raises:
        ConfigError: If the file exists but is not a valid YAML mapping.
    """
    config = {key: list(value) for key, value in DEFAULT_CONFIG.items()}
    config_file = get_config_file(repo_root)

    if not config_file.exists():
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_file}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_file} must contain a mapping, got {type(loaded).__name__}")

    config.update(loaded)
    return config


def get_ignore_patterns(repo_root: Path, extra: list[str] | tuple[str, ...] = ()) -> list[str]:
    """Get the ignore patterns applied to diff collection.

    Args:
        repo_root: The root directory of the git repository.
        extra: Patterns from the action's `ignores` input.

    Returns:
        Configured patterns followed by the extra ones, without duplicates.
    """
    config = load_config(repo_root)
    patterns = []
    for pattern in [*(config.get("ignore") or []), *extra]:
        if pattern and pattern not in patterns:
            patterns.append(pattern)
    return patterns


def get_fallback_models(repo_root: Path) -> list[str]:
    """Get fallback models configured for the repository (may be empty)."""
    config = load_config(repo_root)
    return [str(model) for model in config.get("fallback_models") or []]


def get_scope_config(repo_root: Path) -> ScopeConfig:
    """Get the scope inference configuration for the repository."""
    return load_scope_config_from_dict(load_config(repo_root))
