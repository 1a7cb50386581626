"""State machine that keeps one resumable download consistent.

A coordinator belongs to exactly one ``RequestContext``. The transport hands
it every outgoing request and every incoming response for that context (see
``strata.resumable.hooks``); the continuator asks it to recover from failed
body reads. It moves through three states::

    READY --first response accepted--> ACTIVE --cancel()--> CANCELLED
      |                                                        ^
      +---------------- not resumable / cancel() --------------+

Finishing a download needs no transition; the coordinator is just dropped.
"""

import enum
import typing as t

from ..domain.exceptions import (
    ContinuationError,
    CoordinatorStateError,
    ETagMismatchError,
    FatalDownloadError,
    HttpRangeParseError,
    IncompatibleRequestError,
    MarkerUpdateError,
    UnexpectedResponseError,
)
from ..domain.failures import FailureKind
from ..domain.marker import DownloadHints, ResumableDownloadMarker
from ..domain.ranges import parse_content_range
from ..infrastructure.http.exchange import HttpResponse, OutgoingRequest, RequestContext
from ..infrastructure.logging import get_logger
from .classifier import DownloadErrorClassifier
from .headers import (
    extract_request_hints,
    extract_response_fingerprint,
    extract_single_header_value,
)

if t.TYPE_CHECKING:
    import loguru

_RESUMABLE_FIRST_STATUSES: t.Final = frozenset({200, 206})


class CoordinatorState(enum.StrEnum):
    """Lifecycle states of a coordinator."""

    READY = "ready"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class ResumableDownloadCoordinator:
    """Single source of truth for one in-flight download.

    The coordinator attaches itself to ``context`` on construction, so the
    transport's hooks can find it, and detaches on ``cancel()``.

    Args:
        context: The download's request context. Must not already carry a
            coordinator.
        classifier: Decides which body read failures are fatal.
        logger: Logger for state transitions.

    Raises:
        CoordinatorStateError: If the context already has a coordinator.
    """

    def __init__(
        self,
        context: RequestContext,
        *,
        classifier: DownloadErrorClassifier | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        context.attach(self)
        self._context = context
        self._classifier = classifier or DownloadErrorClassifier()
        self._logger = logger
        self._state = CoordinatorState.READY
        self._hints: DownloadHints | None = None
        self._marker: ResumableDownloadMarker | None = None
        self._response: HttpResponse | None = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def context(self) -> RequestContext:
        return self._context

    @property
    def hints(self) -> DownloadHints | None:
        """Caller headers captured from the first request, if sent yet."""
        return self._hints

    @property
    def marker(self) -> ResumableDownloadMarker | None:
        return self._marker

    @property
    def in_progress(self) -> bool:
        return self._marker is not None

    def prepare(self, request: OutgoingRequest) -> None:
        """Validate and stamp an outgoing request.

        Before the first response, the caller's If-Match and Range headers
        are captured as hints. Afterwards, every request is stamped with the
        marker's If-Match and Range.

        Raises:
            IncompatibleRequestError: For non-GET requests, repeated or
                multi-range headers, or an If-Match naming another object.
            CoordinatorStateError: If the coordinator was cancelled.
        """
        self._require_not_cancelled()

        if request.method != "GET":
            raise IncompatibleRequestError(
                "Invalid method in request provided to resume download: "
                f"expected [GET], got [{request.method}]"
            )

        if self._marker is None:
            if self._hints is not None:
                raise CoordinatorStateError(
                    "Request hints already captured, awaiting first response"
                )
            self._hints = extract_request_hints(request.headers)
            return

        for if_match in request.headers.getall("If-Match", []):
            if if_match != self._marker.etag:
                raise IncompatibleRequestError(
                    "Incorrect ETag in If-Match header: "
                    f"expected [{self._marker.etag}], got [{if_match}]"
                )

        for name, value in self._marker.request_headers().items():
            request.headers[name] = value

    def on_response(self, response: HttpResponse) -> None:
        """Build the marker from the first response, or validate a later one.

        A first response that cannot be resumed makes the coordinator step
        aside quietly; the download then continues without resumption.

        Raises:
            UnexpectedResponseError: If the response disagrees with the
                caller's hints or with the marker. The coordinator is
                cancelled first.
            CoordinatorStateError: If the coordinator was cancelled.
        """
        self._require_not_cancelled()

        if self._marker is None:
            self._create_marker(response)
        else:
            self._validate_continuation(response)

        if self._state is CoordinatorState.ACTIVE:
            self._response = response

    def attempt_recovery(
        self, error: BaseException, bytes_delivered: int
    ) -> ResumableDownloadMarker:
        """Advance the marker past the bytes delivered before ``error``.

        Returns:
            The advanced marker, now used for the next request.

        Raises:
            FatalDownloadError: If the error can never be recovered from.
            ContinuationError: If the marker cannot be advanced.
            CoordinatorStateError: If there is no download in progress.
        """
        marker = self._require_marker()

        if self.classify(error) is FailureKind.FATAL:
            self.abort(error)

        try:
            self._marker = marker.update_range_start(bytes_delivered)
        except MarkerUpdateError as exc:
            self.cancel()
            raise ContinuationError(
                "Failed to update download continuation offset"
            ) from exc

        return self._marker

    def classify(self, error: BaseException) -> FailureKind:
        """Classify a body read failure with this download's rules."""
        return self._classifier.classify(error)

    def abort(self, error: BaseException) -> t.NoReturn:
        """Cancel the download and raise FatalDownloadError caused by ``error``."""
        if self._state is not CoordinatorState.CANCELLED:
            self.cancel()
        raise FatalDownloadError(
            "Fatal exception has occurred while attempting to download "
            f"object content: {error!r}"
        ) from error

    def cancel(self) -> None:
        """Detach from the context, drop the marker and release the response.

        Raises:
            CoordinatorStateError: If already cancelled.
        """
        if self._state is CoordinatorState.CANCELLED:
            raise CoordinatorStateError("Coordinator has already been cancelled")

        self._state = CoordinatorState.CANCELLED
        self._context.detach(self)
        self._marker = None
        if self._response is not None:
            self._response.release()
            self._response = None

    def _create_marker(self, response: HttpResponse) -> None:
        if response.status not in _RESUMABLE_FIRST_STATUSES:
            self._step_aside(f"unsupported status [{response.status}]")
            return

        try:
            fingerprint = extract_response_fingerprint(response.headers)
            if fingerprint is None:
                self._step_aside("response has no ETag or length headers")
                return
            self._marker = ResumableDownloadMarker.from_initial_exchange(
                self._hints or DownloadHints(), fingerprint
            )
        except UnexpectedResponseError:
            self.cancel()
            raise

        self._state = CoordinatorState.ACTIVE
        self._logger.debug(
            f"Resumable download of {response.url} tracking ETag "
            f"[{self._marker.etag}], range [{self._marker.target_range.describe()}]"
        )

    def _validate_continuation(self, response: HttpResponse) -> None:
        marker = self._require_marker()
        try:
            if response.status != 206:
                raise UnexpectedResponseError(
                    f"Invalid response code: expecting [206], got [{response.status}]"
                )

            etag = extract_single_header_value(response.headers, "ETag", required=True)
            if etag != marker.etag:
                raise ETagMismatchError(
                    f"Response ETag mismatch: expected [{marker.etag}], got [{etag}]",
                    expected=marker.etag,
                    actual=etag,
                )

            raw_content_range = extract_single_header_value(
                response.headers, "Content-Range", required=True
            )
            try:
                content_range = parse_content_range(t.cast(str, raw_content_range))
            except HttpRangeParseError as exc:
                raise UnexpectedResponseError(str(exc)) from exc

            marker.validate_response_range(content_range)
        except UnexpectedResponseError:
            self.cancel()
            raise

    def _step_aside(self, reason: str) -> None:
        self._logger.debug(f"HTTP download cannot be automatically continued: {reason}")
        self.cancel()

    def _require_not_cancelled(self) -> None:
        if self._state is CoordinatorState.CANCELLED:
            raise CoordinatorStateError("Coordinator has been cancelled")

    def _require_marker(self) -> ResumableDownloadMarker:
        self._require_not_cancelled()
        if self._marker is None:
            raise CoordinatorStateError("No resumable download in progress")
        return self._marker
