"""Resumable downloads: keep one object download going across broken connections."""

from .classifier import DownloadErrorClassifier
from .continuator import DownloadContinuator, RequestFactory, clone_with_marker_headers
from .coordinator import CoordinatorState, ResumableDownloadCoordinator
from .hooks import ResumableRequestHook, ResumableResponseHook
from .stream import ContinuingStream

__all__ = [
    "ContinuingStream",
    "CoordinatorState",
    "DownloadContinuator",
    "DownloadErrorClassifier",
    "RequestFactory",
    "ResumableDownloadCoordinator",
    "ResumableRequestHook",
    "ResumableResponseHook",
    "clone_with_marker_headers",
]
