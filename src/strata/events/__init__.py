"""Events published while objects download and requests are retried."""

from .base import BaseEmitter
from .emitter import EventEmitter
from .models import (
    BaseEvent,
    DownloadCompletedEvent,
    DownloadContinuationsSummaryEvent,
    DownloadContinuedEvent,
    DownloadEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    ErrorInfo,
    RequestRetryEvent,
)
from .null import NullEmitter

__all__ = [
    "BaseEmitter",
    "EventEmitter",
    "NullEmitter",
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
