"""The action entry point: describe the triggering pull request."""

import os
from pathlib import Path
from typing import Optional

import typer

from prnote.config import (
    API_KEY_ENV_VARS,
    ConfigError,
    LLMProvider,
    load_action_config,
    parse_provider,
)
from prnote.git import GitDiffSource, GitError
from prnote.github import (
    ContextError,
    PublishError,
    PullRequestClient,
    load_context,
)
from prnote.github.client import DEFAULT_API_URL
from prnote.llm import GenerationOrchestrator, LLMError, get_provider
from prnote.logs import setup_logging
from prnote.updater import PullRequestUpdater, UpdaterError
from prnote.user_config import get_fallback_models, get_ignore_patterns, get_scope_config
from prnote.cli.outputs import report_failure, write_outputs


def pick_model(
    provider: LLMProvider,
    model: Optional[str],
    gemini_model: Optional[str],
    openai_model: Optional[str],
) -> Optional[str]:
    """Choose the model input, honoring the legacy per-provider inputs."""
    if model:
        return model
    if provider == LLMProvider.GOOGLE:
        return gemini_model
    if provider == LLMProvider.OPENAI:
        return openai_model
    return None


def run_command(
    ai_name: Optional[str] = typer.Option(
        None,
        "--ai-name",
        envvar="INPUT_AI_NAME",
        help="AI provider (gemini, openai, anthropic, groq, cohere, openrouter)",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        envvar="INPUT_API_KEY",
        help="API key for the provider. Defaults to the provider's environment variable",
    ),
    github_token: Optional[str] = typer.Option(
        None,
        "--github-token",
        envvar=["INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"],
        help="Token used to read and update the pull request",
    ),
    temperature: Optional[str] = typer.Option(
        None,
        "--temperature",
        envvar="INPUT_TEMPERATURE",
        help="Sampling temperature between 0 and 1 (default 0.8)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        envvar="INPUT_MODEL",
        help="Model to request first",
    ),
    gemini_model: Optional[str] = typer.Option(
        None,
        "--gemini-model",
        envvar="INPUT_GEMINI_MODEL",
        hidden=True,
    ),
    openai_model: Optional[str] = typer.Option(
        None,
        "--openai-model",
        envvar="INPUT_OPENAI_MODEL",
        hidden=True,
    ),
    fallback_models: Optional[str] = typer.Option(
        None,
        "--fallback-models",
        envvar="INPUT_FALLBACK_MODELS",
        help="Comma-separated models to fall back to when the model is unavailable",
    ),
    ignores: Optional[str] = typer.Option(
        None,
        "--ignores",
        envvar="INPUT_IGNORES",
        help="Comma-separated glob patterns of files to leave out of the diff",
    ),
    update_title: Optional[str] = typer.Option(
        None,
        "--update-title",
        envvar="INPUT_UPDATE_TITLE",
        help="Also generate a conventional title ('true' to enable)",
    ),
    max_output_tokens: Optional[str] = typer.Option(
        None,
        "--max-output-tokens",
        envvar=["INPUT_MAX_OUTPUT_TOKENS", "PRNOTE_MAX_OUTPUT_TOKENS"],
        help="Output token budget per call (never below 768)",
    ),
    max_diff_chars: Optional[int] = typer.Option(
        None,
        "--max-diff-chars",
        envvar="INPUT_MAX_DIFF_CHARS",
        help="Maximum characters of diff sent to the model",
    ),
    repo_root: Optional[Path] = typer.Option(
        None,
        "--repo-root",
        help="Checked-out repository. Defaults to $GITHUB_WORKSPACE or the current directory",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging (also enabled by RUNNER_DEBUG=1)",
    ),
) -> None:
    """Generate and publish the description of the triggering pull request."""
    logger = setup_logging(debug)
    repo_root = repo_root or Path(os.environ.get("GITHUB_WORKSPACE") or os.getcwd())

    try:
        try:
            provider = parse_provider(ai_name)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        config = load_action_config(
            provider=provider,
            api_key=api_key or os.environ.get(API_KEY_ENV_VARS[provider]),
            github_token=github_token,
            temperature=temperature,
            model=pick_model(provider, model, gemini_model, openai_model),
            fallback_models=fallback_models or get_fallback_models(repo_root) or None,
            ignores=get_ignore_patterns(repo_root, [p.strip() for p in (ignores or "").split(",")]),
            update_title=update_title,
            max_output_tokens=max_output_tokens,
            max_diff_chars=max_diff_chars,
        )
        if not config.github_token:
            raise ConfigError("github_token is required to update the pull request.")

        context = load_context()
        orchestrator = GenerationOrchestrator(
            get_provider(config.provider, api_key=config.api_key),
            fallback_models=config.resolved_fallback_models,
        )
        updater = PullRequestUpdater(
            config=config,
            context=context,
            diff_source=GitDiffSource(config.ignores, config.max_diff_chars, workspace=repo_root),
            orchestrator=orchestrator,
            pr_client=PullRequestClient(
                config.github_token,
                context.owner,
                context.repo,
                api_url=os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
            ),
            logger=logger,
            scope_config=get_scope_config(repo_root),
        )
        outcome = updater.run()

    except (ConfigError, ContextError, UpdaterError, GitError, LLMError, PublishError) as e:
        report_failure(str(e))
        raise typer.Exit(1)

    outputs = {"pr_number": str(outcome.pr_number), "description": outcome.description}
    if outcome.title:
        outputs["title"] = outcome.title
    write_outputs(outputs)
    typer.echo(f"Successfully updated PR #{outcome.pr_number} description.", err=True)
