"""Events describing the lifecycle of one object download."""

from pydantic import Field

from .base import BaseEvent
from .error_info import ErrorInfo


class DownloadEvent(BaseEvent):
    """Base class for download events.

    Every event carries the download_id of the logical download, which stays
    the same across all of its continuation requests.
    """

    download_id: str = Field(description="Unique identifier for this download")
    url: str = Field(description="The URL being downloaded")
    event_type: str = Field(
        default="download.base", description="Event type identifier"
    )


class DownloadStartedEvent(DownloadEvent):
    """Emitted once the first response headers have been accepted."""

    event_type: str = Field(default="download.started")
    total_bytes: int | None = Field(
        default=None, ge=0, description="Bytes the download will deliver, if known"
    )
    resumable: bool = Field(
        default=False, description="Whether failed reads will be continued"
    )


class DownloadCompletedEvent(DownloadEvent):
    """Emitted when every byte has been delivered."""

    event_type: str = Field(default="download.completed")
    destination_path: str | None = Field(
        default=None, description="Where the object was written, if to a file"
    )
    total_bytes: int = Field(default=0, ge=0, description="Total bytes delivered")


class DownloadFailedEvent(DownloadEvent):
    """Emitted when a download is aborted."""

    event_type: str = Field(default="download.failed")
    error: ErrorInfo = Field(description="Why the download was aborted")
    bytes_delivered: int = Field(default=0, ge=0)


class DownloadContinuedEvent(DownloadEvent):
    """Emitted after a continuation request has replaced a failed body."""

    event_type: str = Field(default="download.continued")
    continuation: int = Field(ge=1, description="Continuation number (1-indexed)")
    resume_offset: int = Field(ge=0, description="First byte requested")
    bytes_delivered: int = Field(ge=0, description="Bytes delivered before failing")
    error: ErrorInfo = Field(description="Error that was recovered from")


class DownloadContinuationsSummaryEvent(DownloadEvent):
    """Emitted when a download's continuator is closed."""

    event_type: str = Field(default="download.continuations_summary")
    continuations: int = Field(ge=0, description="Continuations used in total")
