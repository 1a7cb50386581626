"""Custom exceptions for strata."""

from pathlib import Path


class StrataError(Exception):
    """Base exception for strata errors."""

    pass


class ClientNotInitialisedError(StrataError):
    """Raised when the HTTP client is used before its session is opened."""

    pass


class RetryError(StrataError):
    """Raised when retry logic encounters an unexpected state.

    This exception indicates a programming error in the retry handler,
    such as completing the retry loop without returning or raising.
    """

    pass


class HttpRangeParseError(StrataError, ValueError):
    """Raised when a Range or Content-Range header value cannot be parsed."""

    pass


class InvalidRangeError(StrataError, ValueError):
    """Raised when range bounds break the range invariants."""

    pass


class ResumableDownloadError(StrataError):
    """Base exception for resumable download failures.

    Every subclass signals that the download can never succeed as configured,
    as opposed to a transient connection hiccup which is handled internally.
    """

    pass


class IncompatibleRequestError(ResumableDownloadError):
    """Raised when caller supplied request headers cannot be resumed.

    Typical causes are a non-GET method, multi-valued Range or If-Match
    headers, or multi-range Range values. Always raised before any network
    call is made.
    """

    pass


class UnexpectedResponseError(ResumableDownloadError):
    """Raised when a response is missing headers or disagrees with the marker."""

    pass


class ETagMismatchError(UnexpectedResponseError):
    """Raised when a response ETag differs from the expected object identity."""

    def __init__(self, message: str, *, expected: str | None, actual: str | None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class RangeMismatchError(UnexpectedResponseError):
    """Raised when a response Content-Range differs from the expected range."""

    pass


class FatalDownloadError(ResumableDownloadError):
    """Raised when an I/O error that must never be retried interrupts a download.

    The original error is always chained as ``__cause__``.
    """

    pass


class ContinuationError(ResumableDownloadError):
    """Raised when a continuation cannot be built for a failed download."""

    pass


class MaxContinuationsReachedError(ContinuationError):
    """Raised when a download has used up its allowed continuations."""

    def __init__(self, max_continuations: int, cause: BaseException) -> None:
        self.max_continuations = max_continuations
        super().__init__(
            f"Maximum number of continuations reached [{max_continuations}], "
            f"aborting auto-retry: {cause}"
        )


class CoordinatorStateError(ResumableDownloadError):
    """Raised when a coordinator is driven from an invalid state."""

    pass


class MarkerUpdateError(ResumableDownloadError):
    """Raised when a download marker cannot be advanced."""

    pass


class StreamClosedError(StrataError):
    """Raised when reading from a stream that has been closed."""

    pass


class FileValidationError(StrataError):
    """Base exception for file validation failures."""

    pass


class FileAccessError(FileValidationError):
    """Raised when files cannot be accessed for validation."""

    pass


class HashMismatchError(FileValidationError):
    """Raised when calculated hash does not match expected value."""

    def __init__(
        self,
        *,
        expected_hash: str,
        actual_hash: str | None,
        file_path: Path,
    ) -> None:
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        self.file_path = file_path
        message = (
            f"Hash mismatch for {file_path}: expected {expected_hash[:16]}..., "
            f"got {actual_hash[:16] if actual_hash else 'unknown'}..."
        )
        super().__init__(message)
