"""Header extraction for resumable downloads.

Only single-valued ETag, If-Match, Range and Content-Range headers can take
part in a resumable download. These helpers turn raw headers into
``DownloadHints`` and ``ResponseFingerprint`` values, or explain why they
cannot.
"""

from multidict import CIMultiDict, CIMultiDictProxy

from ..domain.exceptions import (
    HttpRangeParseError,
    IncompatibleRequestError,
    ResumableDownloadError,
    UnexpectedResponseError,
)
from ..domain.marker import DownloadHints, ResponseFingerprint
from ..domain.ranges import ResponseRange, parse_content_range, parse_request_range

Headers = CIMultiDict[str] | CIMultiDictProxy[str]


def extract_single_header_value(
    headers: Headers,
    name: str,
    *,
    required: bool,
    error_type: type[ResumableDownloadError] = UnexpectedResponseError,
) -> str | None:
    """Return the only value of a header.

    Args:
        headers: Headers to search, case-insensitively.
        name: Header name.
        required: Raise instead of returning None when the header is absent.
        error_type: Exception raised for any problem.

    Raises:
        ResumableDownloadError: ``error_type`` when the header is missing but
            required, repeated, or blank.
    """
    values = headers.getall(name, [])

    if not values:
        if required:
            raise error_type(
                f"Required [{name}] header for resumable downloads missing"
            )
        return None

    if len(values) > 1:
        raise error_type(
            f"Resumable download not compatible with multi-valued [{name}] header"
        )

    value = values[0].strip()
    if not value:
        raise error_type(f"Invalid {name} header (blank or missing)")
    return value


def extract_request_hints(headers: Headers) -> DownloadHints:
    """Capture the caller's If-Match and Range headers as hints.

    Both headers are checked before failing so the error lists every problem.

    Raises:
        IncompatibleRequestError: If either header is repeated, blank, or the
            Range is not a single closed byte range.
    """
    problems: list[str] = []
    etag: str | None = None
    request_range = None

    try:
        etag = extract_single_header_value(
            headers, "If-Match", required=False, error_type=IncompatibleRequestError
        )
    except IncompatibleRequestError as exc:
        problems.append(str(exc))

    try:
        raw_range = extract_single_header_value(
            headers, "Range", required=False, error_type=IncompatibleRequestError
        )
        if raw_range is not None:
            request_range = parse_request_range(raw_range)
    except (IncompatibleRequestError, HttpRangeParseError) as exc:
        problems.append(str(exc))

    if problems:
        raise IncompatibleRequestError(
            "Incompatible Range and If-Match request headers for resuming download:\n"
            + "\n".join(problems)
        )

    return DownloadHints(etag=etag, range=request_range)


def _parse_content_length(raw: str) -> int:
    # More than 20 digits cannot fit in 64 bits
    if not (raw.isascii() and raw.isdigit()) or len(raw) > 20:
        raise UnexpectedResponseError(f"Invalid Content-Length header [{raw}]")
    return int(raw)


def extract_response_fingerprint(headers: Headers) -> ResponseFingerprint | None:
    """Extract the object identity and delivered range from a response.

    When no Content-Range is present, the whole object range is derived from
    Content-Length.

    Returns:
        The fingerprint, or None when the response lacks an ETag or any way
        to work out its range (or describes an empty object), meaning the
        download cannot be resumed.

    Raises:
        UnexpectedResponseError: If the headers are present but repeated,
            malformed, or disagree with each other.
    """
    etag = extract_single_header_value(headers, "ETag", required=False)
    if etag is None:
        return None

    raw_content_range = extract_single_header_value(
        headers, "Content-Range", required=False
    )
    raw_content_length = extract_single_header_value(
        headers, "Content-Length", required=False
    )

    content_length = (
        _parse_content_length(raw_content_length)
        if raw_content_length is not None
        else None
    )

    if raw_content_range is None:
        if not content_length:
            return None
        return ResponseFingerprint(
            etag=etag, range=ResponseRange.from_content_length(content_length)
        )

    try:
        content_range = parse_content_range(raw_content_range)
    except HttpRangeParseError as exc:
        raise UnexpectedResponseError(str(exc)) from exc

    if content_length is not None and content_length != content_range.content_length:
        raise UnexpectedResponseError(
            "Invalid Content-Length in range response: "
            f"expected [{content_range.content_length}], got [{content_length}]"
        )

    return ResponseFingerprint(etag=etag, range=content_range)


__all__ = [
    "extract_request_hints",
    "extract_response_fingerprint",
    "extract_single_header_value",
]
