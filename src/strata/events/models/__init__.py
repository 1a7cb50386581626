"""Pydantic payloads carried by download and retry events."""

from .base import BaseEvent
from .download import (
    DownloadCompletedEvent,
    DownloadContinuationsSummaryEvent,
    DownloadContinuedEvent,
    DownloadEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
)
from .error_info import ErrorInfo
from .request import RequestRetryEvent

__all__ = [
    "BaseEvent",
    "ErrorInfo",
    "DownloadEvent",
    "DownloadStartedEvent",
    "DownloadCompletedEvent",
    "DownloadFailedEvent",
    "DownloadContinuedEvent",
    "DownloadContinuationsSummaryEvent",
    "RequestRetryEvent",
]
