"""Byte range value types used by the Range and Content-Range headers.

All offsets are inclusive on both ends, following the HTTP convention, and
are bounded to unsigned 64-bit values.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Final

from .exceptions import HttpRangeParseError, InvalidRangeError, RangeMismatchError

UINT64_MAX: Final = 2**64 - 1

# UINT64_MAX has 20 digits, so longer offsets never parse
_OFFSET: Final = r"([0-9]{1,20})"
_REQUEST_RANGE_PATTERN: Final = re.compile(rf"bytes={_OFFSET}-{_OFFSET}")
_CONTENT_RANGE_PATTERN: Final = re.compile(rf"bytes {_OFFSET}-{_OFFSET}/{_OFFSET}")

_REQUEST_RANGE_FORMAT: Final = "bytes=<range-start>-<range-end>"
_CONTENT_RANGE_FORMAT: Final = "bytes <range-start>-<range-end>/<size>"


@dataclass(frozen=True)
class HttpRange(ABC):
    """Inclusive byte span shared by all range variants."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise InvalidRangeError(
                f"Range bounds must not be negative: [{self.start}-{self.end}]"
            )
        if self.end > UINT64_MAX:
            raise InvalidRangeError(
                f"Range end [{self.end}] exceeds maximum byte offset [{UINT64_MAX}]"
            )
        if self.start > self.end:
            raise InvalidRangeError(
                f"<range-start> [{self.start}] must not be greater than "
                f"<range-end> [{self.end}]"
            )

    @property
    def content_length(self) -> int:
        """Number of bytes covered by the range."""
        return self.end - self.start + 1

    @property
    def size(self) -> int | None:
        """Full object length, if this variant carries one."""
        return None

    def matches(self, other: "HttpRange") -> bool:
        """Check whether two ranges describe the same slice of the same object.

        Sizes are only compared when both sides carry one.
        """
        if self.start != other.start or self.end != other.end:
            return False
        if self.size is not None and other.size is not None:
            return self.size == other.size
        return True

    def validate_against(self, content_range: "HttpRange") -> None:
        """Require ``content_range`` to describe the same slice as this range.

        Raises:
            RangeMismatchError: Naming both ranges, if they do not match.
        """
        if not self.matches(content_range):
            raise RangeMismatchError(
                "Content-Range does not match expected range: "
                f"expected [{self.describe()}], got [{content_range.describe()}]"
            )

    def describe(self) -> str:
        """Short human readable form used in error messages."""
        return f"{self.start}-{self.end}"

    @abstractmethod
    def render(self) -> str:
        """Header value form of the range."""


@dataclass(frozen=True)
class RequestRange(HttpRange):
    """Range requested by a client via the ``Range`` header."""

    def render(self) -> str:
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class _SizedRange(HttpRange):
    total_size: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.total_size <= 0 or self.total_size > UINT64_MAX:
            raise InvalidRangeError(
                f"Object size must be between 1 and {UINT64_MAX}, "
                f"got [{self.total_size}]"
            )
        if self.content_length > self.total_size:
            raise InvalidRangeError(
                f"Range length [{self.content_length}] must not be greater than "
                f"object size [{self.total_size}]"
            )

    @property
    def size(self) -> int:
        return self.total_size

    def describe(self) -> str:
        return f"{self.start}-{self.end}/{self.total_size}"

    def render(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total_size}"

    def to_request(self) -> RequestRange:
        """Request form of the same span, without the size."""
        return RequestRange(self.start, self.end)


@dataclass(frozen=True)
class ResponseRange(_SizedRange):
    """Range reported by a server via the ``Content-Range`` header."""

    @classmethod
    def from_content_length(cls, content_length: int) -> "ResponseRange":
        """Whole-object range synthesised from a Content-Length value."""
        if content_length <= 0:
            raise InvalidRangeError(
                f"Content-Length must be positive to derive a range, "
                f"got [{content_length}]"
            )
        return cls(0, content_length - 1, content_length)


@dataclass(frozen=True)
class GoalRange(_SizedRange):
    """Range a download is expected to deliver in full."""

    @classmethod
    def from_response(cls, response_range: ResponseRange) -> "GoalRange":
        return cls(response_range.start, response_range.end, response_range.size)


def _parse_offset(value: str, raw: str, expected: str) -> int:
    offset = int(value)
    if offset > UINT64_MAX:
        raise HttpRangeParseError(
            f"Invalid {expected} value, offset out of range: {raw}"
        )
    return offset


def parse_request_range(raw: str) -> RequestRange:
    """Parse a single ``bytes=<start>-<end>`` Range header value.

    Raises:
        HttpRangeParseError: For any other shape, including multi-range,
            open-ended and suffix ranges.
    """
    match = _REQUEST_RANGE_PATTERN.fullmatch(raw.strip())
    if match is None:
        raise HttpRangeParseError(
            f"Invalid Range format, expected: [{_REQUEST_RANGE_FORMAT}], got: {raw}"
        )

    start, end = (_parse_offset(group, raw, "Range") for group in match.groups())
    try:
        return RequestRange(start, end)
    except InvalidRangeError as exc:
        raise HttpRangeParseError(f"Invalid Range value {raw}: {exc}") from exc


def parse_content_range(raw: str) -> ResponseRange:
    """Parse a ``bytes <start>-<end>/<size>`` Content-Range header value.

    Raises:
        HttpRangeParseError: If the value is malformed or describes an
            impossible range.
    """
    match = _CONTENT_RANGE_PATTERN.fullmatch(raw.strip())
    if match is None:
        raise HttpRangeParseError(
            "Invalid Content-Range format, "
            f"expected: [{_CONTENT_RANGE_FORMAT}], got: {raw}"
        )

    start, end, size = (
        _parse_offset(group, raw, "Content-Range") for group in match.groups()
    )
    try:
        return ResponseRange(start, end, size)
    except InvalidRangeError as exc:
        raise HttpRangeParseError(f"Invalid Content-Range value {raw}: {exc}") from exc


__all__ = [
    "GoalRange",
    "HttpRange",
    "RequestRange",
    "ResponseRange",
    "UINT64_MAX",
    "parse_content_range",
    "parse_request_range",
]
