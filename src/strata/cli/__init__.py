"""Command-line entry point for fetching objects with strata."""

from .app import create_cli_app

__all__ = ["create_cli_app", "cli"]


def cli() -> None:
    """Build the Typer app and run it against sys.argv."""
    app = create_cli_app()
    app()
