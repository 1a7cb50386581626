"""Cat command implementation."""

import asyncio

import typer

from ..output.progress import subscribe_progress
from ..state import CLIState


def cat(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Object path or URL to print"),
) -> None:
    """Write an object's contents to stdout.

    Continuations and failures are reported on stderr so the output stays
    byte-for-byte identical to the stored object.
    """
    state: CLIState = ctx.obj

    emitter = state.create_emitter()
    subscribe_progress(emitter, quiet=True)

    async def run() -> None:
        async with state.create_client(emitter=emitter) as client:
            async with await client.get_object(path) as stream:
                async for chunk in stream:
                    typer.echo(chunk, nl=False)

    try:
        asyncio.run(run())
    except Exception as e:
        typer.secho(f"Download failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
