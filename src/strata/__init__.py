"""strata - asyncio object store client with resumable downloads."""

from .config import Settings
from .domain import (
    ContinuationError,
    ContinuationPolicy,
    ETagMismatchError,
    FatalDownloadError,
    IncompatibleRequestError,
    MaxContinuationsReachedError,
    ResumableDownloadError,
    StrataError,
    UnexpectedResponseError,
)
from .domain.hash_validation import HashAlgorithm, HashConfig
from .events import EventEmitter
from .objects import ObjectStoreClient
from .resumable import ContinuingStream

__all__ = [
    "ObjectStoreClient",
    "ContinuingStream",
    "Settings",
    "ContinuationPolicy",
    "EventEmitter",
    "HashAlgorithm",
    "HashConfig",
    # Exceptions
    "StrataError",
    "ResumableDownloadError",
    "IncompatibleRequestError",
    "UnexpectedResponseError",
    "ETagMismatchError",
    "FatalDownloadError",
    "ContinuationError",
    "MaxContinuationsReachedError",
]
