"""CLI command listing providers and their model ladders."""

from typing import Optional

import typer

from prnote.config import (
    API_KEY_ENV_VARS,
    DEFAULT_MODELS,
    FALLBACK_MODELS,
    PROVIDER_ALIASES,
    LLMProvider,
    parse_provider,
)
from prnote.llm.orchestrator import build_model_ladder


def models_command(
    provider: Optional[str] = typer.Argument(
        None,
        help="Only show this provider (name or alias)",
    ),
) -> None:
    """Show the default model and fallback ladder of each provider."""
    if provider:
        try:
            providers = [parse_provider(provider)]
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    else:
        providers = list(LLMProvider)

    for p in providers:
        aliases = sorted(name for name, target in PROVIDER_ALIASES.items() if target == p)
        ladder = build_model_ladder(DEFAULT_MODELS[p], FALLBACK_MODELS[p])

        typer.echo(f"{p.value} (ai_name: {', '.join(aliases)})")
        typer.echo(f"  API key: {API_KEY_ENV_VARS[p]}")
        for i, model in enumerate(ladder):
            marker = "default" if i == 0 else f"fallback {i}"
            typer.echo(f"  {model:<40} {marker}")
        typer.echo()
