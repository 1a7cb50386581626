"""Progress display for CLI downloads, driven by download events."""

import typer

from ...events import (
    DownloadCompletedEvent,
    DownloadContinuedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    EventEmitter,
)


def _format_size(total_bytes: int | None) -> str:
    if total_bytes is None:
        return "unknown size"
    if total_bytes < 1024:
        return f"{total_bytes} B"
    size = total_bytes / 1024
    for unit in ("KiB", "MiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def display_download_started(event: DownloadStartedEvent) -> None:
    """Display download started message from event."""
    suffix = "" if event.resumable else ", not resumable"
    typer.echo(f"Downloading: {event.url} ({_format_size(event.total_bytes)}{suffix})")


def display_download_continued(event: DownloadContinuedEvent) -> None:
    """Report a recovered connection failure."""
    typer.secho(
        f"↻ Connection lost ({event.error.exc_type.rsplit('.', 1)[-1]}), "
        f"resuming from byte {event.resume_offset} "
        f"(continuation {event.continuation})",
        fg=typer.colors.YELLOW,
        err=True,
    )


def display_download_completed(event: DownloadCompletedEvent) -> None:
    """Display completion message from event."""
    target = event.destination_path or event.url
    typer.secho(
        f"✓ Downloaded: {target} ({_format_size(event.total_bytes)})",
        fg=typer.colors.GREEN,
    )


def display_download_failed(event: DownloadFailedEvent) -> None:
    """Display error message from event.

    Args:
        event: Download failed event
    """
    typer.secho(f"✗ Failed: {event.url}", fg=typer.colors.RED, err=True)
    typer.secho(f"  Error: {event.error.message}", fg=typer.colors.RED, err=True)


def subscribe_progress(emitter: EventEmitter, *, quiet: bool = False) -> None:
    """Register the display handlers on ``emitter``.

    With ``quiet`` only continuations and failures are shown, on stderr.
    """
    emitter.on("download.continued", display_download_continued)
    emitter.on("download.failed", display_download_failed)
    if not quiet:
        emitter.on("download.started", display_download_started)
        emitter.on("download.completed", display_download_completed)
