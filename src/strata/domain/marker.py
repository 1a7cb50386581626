"""Download marker tracking object identity and progress across continuations."""

import dataclasses
from dataclasses import dataclass

from .exceptions import ETagMismatchError, MarkerUpdateError
from .ranges import GoalRange, RequestRange, ResponseRange


@dataclass(frozen=True)
class DownloadHints:
    """If-Match and Range values the caller set on the first request."""

    etag: str | None = None
    range: RequestRange | None = None


@dataclass(frozen=True)
class ResponseFingerprint:
    """Object identity and delivered range extracted from a response."""

    etag: str
    range: ResponseRange


@dataclass(frozen=True)
class ResumableDownloadMarker:
    """Identity and progress of one logical download.

    The marker is immutable: advancing it returns a new marker, and the
    owner swaps the reference. Only the start of ``current_range`` ever
    moves; its end always equals the end of ``target_range``.
    """

    etag: str
    target_range: GoalRange
    current_range: RequestRange

    def __post_init__(self) -> None:
        if not self.etag or not self.etag.strip():
            raise ValueError("Marker ETag must not be blank")
        if self.current_range.end != self.target_range.end:
            raise MarkerUpdateError(
                f"Current range end [{self.current_range.end}] must equal "
                f"target range end [{self.target_range.end}]"
            )
        if self.current_range.start < self.target_range.start:
            raise MarkerUpdateError(
                f"Current range start [{self.current_range.start}] must not precede "
                f"target range start [{self.target_range.start}]"
            )

    @classmethod
    def from_initial_exchange(
        cls, hints: DownloadHints, fingerprint: ResponseFingerprint
    ) -> "ResumableDownloadMarker":
        """Build a marker from the first response, checking the caller's hints.

        Raises:
            ETagMismatchError: If the caller's If-Match differs from the ETag.
            RangeMismatchError: If the caller's Range differs from the
                Content-Range the server answered with.
        """
        if hints.etag is not None and hints.etag != fingerprint.etag:
            raise ETagMismatchError(
                f"ETag does not match If-Match: If-Match [{hints.etag}], "
                f"ETag [{fingerprint.etag}]",
                expected=hints.etag,
                actual=fingerprint.etag,
            )

        if hints.range is not None:
            hints.range.validate_against(fingerprint.range)

        target = GoalRange.from_response(fingerprint.range)
        return cls(
            etag=fingerprint.etag,
            target_range=target,
            current_range=target.to_request(),
        )

    @property
    def total_range_size(self) -> int:
        """Number of bytes the whole download delivers."""
        return self.target_range.content_length

    def update_range_start(self, bytes_delivered: int) -> "ResumableDownloadMarker":
        """Return a marker whose current range starts after the delivered bytes.

        Args:
            bytes_delivered: Total bytes handed to the caller so far, counted
                from the start of the target range.

        Raises:
            MarkerUpdateError: If the count is negative, would move the start
                backwards, or leaves nothing to deliver.
        """
        if bytes_delivered < 0:
            raise MarkerUpdateError(
                f"Bytes delivered must not be negative, got [{bytes_delivered}]"
            )

        next_start = self.target_range.start + bytes_delivered
        if next_start < self.current_range.start:
            raise MarkerUpdateError(
                f"Next start position [{next_start}] cannot be less than "
                f"previous start position [{self.current_range.start}]"
            )
        if next_start > self.target_range.end:
            raise MarkerUpdateError(
                f"Next start position [{next_start}] cannot be greater than "
                f"end of range [{self.target_range.end}]"
            )

        return dataclasses.replace(
            self, current_range=RequestRange(next_start, self.target_range.end)
        )

    def validate_response_range(self, response_range: ResponseRange) -> None:
        """Check a continuation's Content-Range against the current range.

        Raises:
            RangeMismatchError: If start, end or object size differ.
        """
        expected = ResponseRange(
            self.current_range.start, self.current_range.end, self.target_range.size
        )
        expected.validate_against(response_range)

    def request_headers(self) -> dict[str, str]:
        """Headers every resumption request must carry."""
        return {
            "If-Match": self.etag,
            "Range": self.current_range.render(),
        }
