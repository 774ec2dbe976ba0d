"""CLI entry point for prnote.

This module provides the main CLI application that combines all commands
into a single unified interface.
"""

import typer

from prnote import __version__
from prnote.cli.models import models_command
from prnote.cli.run import run_command
from prnote.cli.title import title_command


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"prnote {__version__}")
        raise typer.Exit()


def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """prnote: AI-written pull request descriptions and titles."""


# Main application
app = typer.Typer(
    name="prnote",
    help="prnote: AI-written pull request descriptions and titles",
    add_completion=False,
)

app.callback()(main_callback)
app.command("run")(run_command)
app.command("title")(title_command)
app.command("models")(models_command)


__all__ = [
    "app",
    "main_callback",
    "models_command",
    "run_command",
    "title_command",
]
