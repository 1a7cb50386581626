"""Resume a failed download body from the exact byte it stopped at."""

import typing as t

import aiohttp

from ..domain.exceptions import (
    ContinuationError,
    CoordinatorStateError,
    MaxContinuationsReachedError,
    ResumableDownloadError,
    UnexpectedResponseError,
)
from ..domain.failures import FailureKind
from ..domain.marker import ResumableDownloadMarker
from ..events import (
    BaseEmitter,
    DownloadContinuationsSummaryEvent,
    DownloadContinuedEvent,
    ErrorInfo,
    NullEmitter,
)
from ..infrastructure.http.client import AiohttpClient
from ..infrastructure.http.exchange import HttpResponse, OutgoingRequest
from ..infrastructure.logging import get_logger
from .coordinator import CoordinatorState, ResumableDownloadCoordinator

if t.TYPE_CHECKING:
    import loguru

RequestFactory = t.Callable[[OutgoingRequest, ResumableDownloadMarker], OutgoingRequest]


def clone_with_marker_headers(
    original: OutgoingRequest, marker: ResumableDownloadMarker
) -> OutgoingRequest:
    """Copy the original request, rewriting Range and If-Match from the marker."""
    request = original.clone()
    for name, value in marker.request_headers().items():
        request.headers[name] = value
    return request


class DownloadContinuator:
    """Builds replacement response bodies for a download whose read failed.

    Each call to ``build_continuation`` issues one conditional range request
    for the bytes the caller has not received yet. The request goes through
    the download's own request context with the transport's automatic
    retries switched off, so the transport hooks stamp and validate it
    against the coordinator's marker.

    Args:
        client: Transport used for continuation requests.
        request: The request that started the download.
        coordinator: The download's coordinator, already ACTIVE.
        download_id: Identifier reported in events.
        max_continuations: Continuations allowed before giving up.
            None means unlimited.
        request_factory: Builds each continuation request from the original
            request and the advanced marker.
        emitter: Receives continuation events.
        logger: Logger for continuation attempts.

    Raises:
        ValueError: If max_continuations is not None and below 1.
        CoordinatorStateError: If the coordinator has no marker.
    """

    def __init__(
        self,
        client: AiohttpClient,
        request: OutgoingRequest,
        coordinator: ResumableDownloadCoordinator,
        *,
        download_id: str,
        max_continuations: int | None = None,
        request_factory: RequestFactory = clone_with_marker_headers,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        if max_continuations is not None and max_continuations < 1:
            raise ValueError(
                "Maximum continuations must be None (unlimited) or positive, "
                f"got [{max_continuations}]"
            )
        if coordinator.state is not CoordinatorState.ACTIVE:
            raise CoordinatorStateError(
                f"Cannot continue a download whose coordinator is {coordinator.state}"
            )

        self._client = client
        self._request = request
        self._coordinator = coordinator
        self._download_id = download_id
        self._max_continuations = max_continuations
        self._request_factory = request_factory
        self._emitter = emitter or NullEmitter()
        self._logger = logger
        self._continuations = 0
        self._closed = False

    @property
    def continuations(self) -> int:
        """Continuations built so far."""
        return self._continuations

    @property
    def coordinator(self) -> ResumableDownloadCoordinator:
        return self._coordinator

    @property
    def closed(self) -> bool:
        return self._closed

    async def build_continuation(
        self, error: Exception, bytes_delivered: int
    ) -> HttpResponse:
        """Return a response whose body continues after ``bytes_delivered``.

        Args:
            error: The error raised while reading the previous body.
            bytes_delivered: Total bytes handed to the caller so far.

        Returns:
            A 206 response validated against the marker, or an empty response
            if every byte had already been delivered.

        Raises:
            Exception: ``error`` itself, if it is not a transport error.
            FatalDownloadError: If ``error`` can never be recovered from.
            MaxContinuationsReachedError: If the continuation limit is used up.
            ContinuationError: If the continuation request fails.
            UnexpectedResponseError: If the server answers with another
                status, another ETag, or another range.
        """
        kind = self._coordinator.classify(error)
        if kind is FailureKind.NOT_IO:
            raise error
        if self._closed:
            raise ContinuationError("Continuator is closed") from error
        if kind is FailureKind.FATAL:
            self._coordinator.abort(error)

        self._continuations += 1
        if (
            self._max_continuations is not None
            and self._continuations > self._max_continuations
        ):
            self._cancel_coordinator()
            raise MaxContinuationsReachedError(
                self._max_continuations, error
            ) from error

        marker = self._coordinator.marker
        if marker is None:
            raise CoordinatorStateError("No resumable download in progress") from error

        if bytes_delivered == marker.total_range_size:
            self._logger.debug(
                f"Recovered EOF for {self._request.url} after "
                f"{type(error).__name__}, all {bytes_delivered} bytes delivered"
            )
            return HttpResponse.empty(url=self._request.url)

        marker = self._coordinator.attempt_recovery(error, bytes_delivered)
        request = self._request_factory(self._request, marker)

        self._logger.warning(
            f"Continuing download {request.url} from byte "
            f"{marker.current_range.start} after {type(error).__name__}: {error} "
            f"(continuation {self._continuations})"
        )

        context = self._coordinator.context
        context.retry_disabled = True
        try:
            response = await self._client.request(
                request.method, request.url, headers=request.headers, context=context
            )
        except ResumableDownloadError:
            raise
        except aiohttp.ClientResponseError as exc:
            # 412 means the object changed since the download started
            self._cancel_coordinator()
            raise UnexpectedResponseError(
                f"Invalid response code: expecting [206], got [{exc.status}]"
            ) from exc
        except Exception as exc:
            self._cancel_coordinator()
            raise ContinuationError(
                f"Exception occurred while attempting to build continuation: {exc}"
            ) from exc

        await self._emitter.emit(
            "download.continued",
            DownloadContinuedEvent(
                download_id=self._download_id,
                url=request.url,
                continuation=self._continuations,
                resume_offset=marker.current_range.start,
                bytes_delivered=bytes_delivered,
                error=ErrorInfo.from_exception(error),
            ),
        )
        return response

    async def aclose(self) -> None:
        """Record how many continuations the download used. Idempotent."""
        if self._closed:
            return
        self._closed = True

        if self._continuations:
            self._logger.info(
                f"Download {self._request.url} used "
                f"{self._continuations} continuation(s)"
            )
        await self._emitter.emit(
            "download.continuations_summary",
            DownloadContinuationsSummaryEvent(
                download_id=self._download_id,
                url=self._request.url,
                continuations=self._continuations,
            ),
        )

    def _cancel_coordinator(self) -> None:
        if self._coordinator.state is not CoordinatorState.CANCELLED:
            self._coordinator.cancel()
