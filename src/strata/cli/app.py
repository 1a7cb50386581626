"""CLI application factory."""

from typing import Optional

import typer

from ..app import create_app
from ..config.settings import LogLevel, Settings, build_settings
from .commands import cat, get
from .state import CLIState


def create_cli_app(
    settings: Settings | None = None, state: CLIState | None = None
) -> typer.Typer:
    """Create CLI application with optional settings or state override.

    Args:
        settings: Optional Settings override for testing
        state: Optional fully built CLIState, e.g. with a mocked client factory

    Returns:
        Configured Typer application with commands registered
    """
    app = typer.Typer(
        name="strata",
        help="strata - resumable downloads from HTTP object stores",
        no_args_is_help=True,
    )

    @app.callback()
    def setup(
        ctx: typer.Context,
        base_url: Optional[str] = typer.Option(
            None,
            "--base-url",
            "-u",
            help="Object store endpoint that object paths resolve against",
        ),
        continuations: Optional[int] = typer.Option(
            None,
            "--continuations",
            "-c",
            help="Continuations per download (0 disables, -1 is unlimited)",
            min=-1,
        ),
        timeout: Optional[float] = typer.Option(
            None,
            "--timeout",
            "-t",
            help="Socket connect and read timeout in seconds",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Enable verbose output (DEBUG logging)",
        ),
    ) -> None:
        """Global options available to all commands."""
        if state is not None:
            ctx.obj = state
            return

        if settings is not None:
            resolved_settings = settings
        else:
            resolved_settings = build_settings(
                base_url=base_url,
                download_continuations=continuations,
                timeout=timeout,
                log_level=LogLevel.DEBUG if verbose else None,
            )
            create_app(resolved_settings)

        ctx.obj = CLIState(resolved_settings)

    app.command("get")(get)
    app.command("cat")(cat)
    return app
