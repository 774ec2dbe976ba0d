"""Logging setup for prnote.

Inside GitHub Actions, records are written as workflow commands so that
warnings and errors show up as annotations and debug lines only appear when
step debugging is on. Elsewhere a plain format is used.
"""

import logging
import os
import sys
from typing import Mapping, Optional

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless debugging
NOISY_LOGGERS = ["httpx", "httpcore", "urllib3", "openai", "anthropic", "google_genai", "groq", "cohere"]


def running_in_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS") == "true"


def debug_requested(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when the runner was started with step debug logging."""
    environ = os.environ if environ is None else environ
    return environ.get("RUNNER_DEBUG") == "1"


def escape_workflow_data(message: str) -> str:
    """Escape a message for use in a workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{escape_workflow_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_workflow_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"::debug::{escape_workflow_data(message)}"
        return message


def setup_logging(debug: bool = False, environ: Optional[Mapping[str, str]] = None) -> logging.Logger:
    """Configure the prnote logger.

    Args:
        debug: Enable debug output. RUNNER_DEBUG=1 enables it too.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        The "prnote" logger.
    """
    debug = debug or debug_requested(environ)

    handler = logging.StreamHandler(sys.stderr)
    if running_in_actions(environ):
        handler.setFormatter(ActionsFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    logger = logging.getLogger("prnote")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    # Suppress verbose logs from libraries unless in debug mode
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    return logger
