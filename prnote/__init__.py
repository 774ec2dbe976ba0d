"""AI pull request description and title generator."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("prnote")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
