"""CLI command for synthesizing a conventional title locally."""

import os
from pathlib import Path
from typing import List, Optional

import typer

from prnote.config import ConfigError
from prnote.git import GitError, get_changed_files, get_diff, get_repo_root
from prnote.scope import infer_scope
from prnote.styles import infer_commit_type, synthesize_title
from prnote.user_config import get_ignore_patterns, get_scope_config


def title_command(
    raw_title: str = typer.Argument(..., help="Title text to normalize, e.g. the model's output"),
    base: Optional[str] = typer.Option(
        None,
        "--base",
        "-b",
        help="Base branch; with --head, reads changed files and diff from git",
    ),
    head: Optional[str] = typer.Option(
        None,
        "--head",
        help="Head branch",
    ),
    remote: str = typer.Option(
        "origin",
        "--remote",
        help="Remote holding the base and head branches",
    ),
    files: Optional[List[str]] = typer.Option(
        None,
        "--file",
        "-f",
        help="Changed file path (repeatable); used instead of git",
    ),
    current_title: str = typer.Option(
        "",
        "--current-title",
        help="The pull request's current title",
    ),
    explain: bool = typer.Option(
        False,
        "--explain",
        help="Show the inferred type and scope",
    ),
) -> None:
    """Turn free-form title text into a `type(scope): subject` title."""
    workspace = os.environ.get("GITHUB_WORKSPACE")
    diff_text = ""
    changed_files = list(files or [])

    try:
        repo_root = Path(workspace) if workspace else get_repo_root()
        scope_config = get_scope_config(repo_root)
        if not changed_files and base and head:
            ignores = get_ignore_patterns(repo_root)
            changed_files = get_changed_files(base, head, ignores, remote)
            diff_text = get_diff(base, head, ignores, remote=remote)
    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    title = synthesize_title(raw_title, diff_text, changed_files, current_title, scope_config)

    if explain:
        scope_result = infer_scope(changed_files, scope_config)
        commit_type = infer_commit_type(diff_text, changed_files, current_title, raw_title)
        typer.echo(f"Inferred type: {commit_type}", err=True)
        typer.echo(f"Inferred scope: {scope_result.scope or '(none)'} ({scope_result.reason})", err=True)

    typer.echo(title)
