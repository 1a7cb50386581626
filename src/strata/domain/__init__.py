"""Domain layer - byte ranges, markers, retry models and exceptions."""

from .exceptions import (
    ClientNotInitialisedError,
    ContinuationError,
    CoordinatorStateError,
    ETagMismatchError,
    FatalDownloadError,
    HttpRangeParseError,
    IncompatibleRequestError,
    InvalidRangeError,
    MarkerUpdateError,
    MaxContinuationsReachedError,
    RangeMismatchError,
    ResumableDownloadError,
    RetryError,
    StrataError,
    StreamClosedError,
    UnexpectedResponseError,
)
from .failures import ContinuationPolicy, FailureKind
from .marker import DownloadHints, ResponseFingerprint, ResumableDownloadMarker
from .ranges import (
    GoalRange,
    HttpRange,
    RequestRange,
    ResponseRange,
    parse_content_range,
    parse_request_range,
)
from .retry import ErrorCategory, RetryConfig, RetryPolicy

__all__ = [
    # Ranges
    "HttpRange",
    "RequestRange",
    "ResponseRange",
    "GoalRange",
    "parse_request_range",
    "parse_content_range",
    # Markers
    "DownloadHints",
    "ResponseFingerprint",
    "ResumableDownloadMarker",
    # Failure classification
    "ContinuationPolicy",
    "FailureKind",
    # Retry Models
    "ErrorCategory",
    "RetryConfig",
    "RetryPolicy",
    # Exceptions
    "StrataError",
    "ClientNotInitialisedError",
    "RetryError",
    "HttpRangeParseError",
    "InvalidRangeError",
    "ResumableDownloadError",
    "IncompatibleRequestError",
    "UnexpectedResponseError",
    "ETagMismatchError",
    "RangeMismatchError",
    "FatalDownloadError",
    "ContinuationError",
    "MaxContinuationsReachedError",
    "CoordinatorStateError",
    "MarkerUpdateError",
    "StreamClosedError",
]
