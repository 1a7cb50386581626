"""Tests for resumable download header extraction."""

import pytest
from multidict import CIMultiDict

from strata.domain.exceptions import IncompatibleRequestError, UnexpectedResponseError
from strata.domain.ranges import RequestRange, ResponseRange
from strata.resumable.headers import (
    extract_request_hints,
    extract_response_fingerprint,
    extract_single_header_value,
)


def headers(*pairs: tuple[str, str]) -> CIMultiDict[str]:
    return CIMultiDict(pairs)


class TestExtractSingleHeaderValue:
    def test_returns_stripped_value(self):
        """Surrounding whitespace is dropped."""
        value = extract_single_header_value(
            headers(("etag", '  "abc" ')), "ETag", required=True
        )
        assert value == '"abc"'

    def test_missing_optional_header_is_none(self):
        assert extract_single_header_value(headers(), "ETag", required=False) is None

    def test_missing_required_header_raises(self):
        with pytest.raises(UnexpectedResponseError, match=r"Required \[ETag\]"):
            extract_single_header_value(headers(), "ETag", required=True)

    def test_repeated_header_raises(self):
        with pytest.raises(UnexpectedResponseError, match="multi-valued"):
            extract_single_header_value(
                headers(("ETag", '"a"'), ("ETag", '"b"')), "ETag", required=False
            )

    def test_blank_header_raises(self):
        with pytest.raises(UnexpectedResponseError, match="blank"):
            extract_single_header_value(headers(("ETag", "  ")), "ETag", required=False)

    def test_custom_error_type(self):
        """Callers choose which error describes the problem."""
        with pytest.raises(IncompatibleRequestError):
            extract_single_header_value(
                headers(),
                "If-Match",
                required=True,
                error_type=IncompatibleRequestError,
            )


class TestExtractRequestHints:
    def test_no_headers_gives_empty_hints(self):
        hints = extract_request_hints(headers())
        assert hints.etag is None
        assert hints.range is None

    def test_captures_if_match_and_range(self):
        hints = extract_request_hints(
            headers(("If-Match", '"abc"'), ("Range", "bytes=10-19"))
        )
        assert hints.etag == '"abc"'
        assert hints.range == RequestRange(10, 19)

    @pytest.mark.parametrize("raw", ["bytes=0-", "bytes=-5", "bytes=0-1,4-5"])
    def test_rejects_unsupported_ranges(self, raw):
        """Only a single closed byte range can be resumed."""
        with pytest.raises(IncompatibleRequestError, match="Incompatible Range"):
            extract_request_hints(headers(("Range", raw)))

    def test_reports_every_problem(self):
        """Both headers are checked before failing."""
        with pytest.raises(IncompatibleRequestError) as exc_info:
            extract_request_hints(
                headers(
                    ("If-Match", '"a"'),
                    ("If-Match", '"b"'),
                    ("Range", "bytes=0-1"),
                    ("Range", "bytes=2-3"),
                )
            )
        message = str(exc_info.value)
        assert "[If-Match]" in message
        assert "[Range]" in message


class TestExtractResponseFingerprint:
    def test_full_object_from_content_length(self):
        fingerprint = extract_response_fingerprint(
            headers(("ETag", '"abc"'), ("Content-Length", "100"))
        )
        assert fingerprint is not None
        assert fingerprint.etag == '"abc"'
        assert fingerprint.range == ResponseRange(0, 99, 100)

    def test_partial_object_from_content_range(self):
        fingerprint = extract_response_fingerprint(
            headers(
                ("ETag", '"abc"'),
                ("Content-Range", "bytes 10-19/100"),
                ("Content-Length", "10"),
            )
        )
        assert fingerprint is not None
        assert fingerprint.range == ResponseRange(10, 19, 100)

    @pytest.mark.parametrize(
        "pairs",
        [
            (("Content-Length", "100"),),
            (("ETag", '"abc"'),),
            (("ETag", '"abc"'), ("Content-Length", "0")),
        ],
        ids=["no-etag", "no-length", "empty-object"],
    )
    def test_not_resumable_returns_none(self, pairs):
        assert extract_response_fingerprint(headers(*pairs)) is None

    def test_content_length_disagreeing_with_range_raises(self):
        with pytest.raises(UnexpectedResponseError, match="Invalid Content-Length"):
            extract_response_fingerprint(
                headers(
                    ("ETag", '"abc"'),
                    ("Content-Range", "bytes 10-19/100"),
                    ("Content-Length", "11"),
                )
            )

    @pytest.mark.parametrize("raw", ["abc", "-1", "+5", "1_000", "9" * 21])
    def test_malformed_content_length_raises(self, raw):
        with pytest.raises(UnexpectedResponseError, match="Invalid Content-Length"):
            extract_response_fingerprint(
                headers(("ETag", '"abc"'), ("Content-Length", raw))
            )

    def test_malformed_content_range_raises(self):
        with pytest.raises(UnexpectedResponseError, match="Content-Range"):
            extract_response_fingerprint(
                headers(("ETag", '"abc"'), ("Content-Range", "bytes 10-19/*"))
            )

    def test_oversized_content_range_raises(self):
        """Offsets too long to be byte positions are a parse failure."""
        with pytest.raises(UnexpectedResponseError, match="Content-Range"):
            extract_response_fingerprint(
                headers(
                    ("ETag", '"abc"'), ("Content-Range", f"bytes 0-{'9' * 5000}/1")
                )
            )
