"""GitHub Actions step outputs."""

import os
import uuid
from typing import Mapping, Optional

import typer

from prnote.logs import escape_workflow_data, running_in_actions


def format_output(name: str, value: str, delimiter: Optional[str] = None) -> str:
    """Render one output in the $GITHUB_OUTPUT file format.

    Single-line values use name=value; multi-line values use the heredoc form
    with a delimiter that cannot occur in the value.
    """
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"

    delimiter = delimiter or f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in value:
        raise ValueError(f"Output delimiter {delimiter!r} occurs in the value of {name}")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(outputs: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> None:
    """Append outputs to $GITHUB_OUTPUT, or echo them when it is not set."""
    environ = os.environ if environ is None else environ
    output_path = environ.get("GITHUB_OUTPUT")

    if not output_path:
        for name, value in outputs.items():
            typer.echo(f"{name}={value}")
        return

    with open(output_path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(format_output(name, value))


def report_failure(message: str, environ: Optional[Mapping[str, str]] = None) -> None:
    """Print a failure so that the runner shows it as an error annotation."""
    if running_in_actions(environ):
        typer.echo(f"::error::{escape_workflow_data(message)}", err=True)
    else:
        typer.echo(f"Error: {message}", err=True)
