"""Get command implementation."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...domain.hash_validation import HashConfig
from ..output.progress import subscribe_progress
from ..state import CLIState


def validate_hash(hash_str: str) -> HashConfig:
    """Validate and parse hash string.

    Args:
        hash_str: Hash string in format 'algorithm:hash'

    Returns:
        Validated HashConfig object

    Raises:
        typer.Exit: If hash format is invalid or algorithm is unsupported
    """
    try:
        return HashConfig.from_checksum_string(hash_str)
    except ValueError as e:
        typer.secho(f"✗ Invalid hash: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def get(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Object path or URL to download"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output file or directory"
    ),
    hash_str: Optional[str] = typer.Option(
        None, "--hash", help="Hash for validation (format: algorithm:hash)"
    ),
    verify: bool = typer.Option(
        False, "--verify", help="Check the file against the server's Content-MD5"
    ),
) -> None:
    """Download an object to a file.

    Examples:
        strata --base-url https://store.example.com get reports/q3.csv
        strata get https://store.example.com/reports/q3.csv -o ./q3.csv
        strata get reports/q3.csv --hash sha256:abc123...
    """
    state: CLIState = ctx.obj

    # Validate inputs early at CLI boundary
    hash_config = validate_hash(hash_str) if hash_str else None
    destination = output if output else state.settings.download_dir

    emitter = state.create_emitter()
    subscribe_progress(emitter)

    async def run() -> Path:
        async with state.create_client(emitter=emitter) as client:
            return await client.get_to_path(
                path,
                destination,
                hash_config=hash_config,
                verify_checksum=verify,
            )

    try:
        asyncio.run(run())
    except Exception as e:
        typer.secho(f"Download failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
