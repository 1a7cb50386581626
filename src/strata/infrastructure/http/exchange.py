"""Request, response and per-request context types used by the transport."""

import typing as t
from dataclasses import dataclass, field

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from ...domain.exceptions import CoordinatorStateError

if t.TYPE_CHECKING:
    from ...resumable.coordinator import ResumableDownloadCoordinator


class ByteSource(t.Protocol):
    """Anything a response body can be read from."""

    async def read(self, n: int = -1) -> bytes: ...


class EmptyByteSource:
    """Body that is already at EOF."""

    async def read(self, n: int = -1) -> bytes:
        return b""


@dataclass
class OutgoingRequest:
    """Mutable description of a request that hooks may stamp before sending."""

    method: str
    url: str
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)

    def clone(self) -> "OutgoingRequest":
        """Copy of this request with an independent header multidict."""
        return OutgoingRequest(self.method, self.url, CIMultiDict(self.headers))


@dataclass
class RequestContext:
    """State shared by every exchange that belongs to one download.

    A context carries at most one coordinator, and the flag that stops the
    transport from retrying requests on its own.
    """

    retry_disabled: bool = False
    coordinator: "ResumableDownloadCoordinator | None" = None

    def attach(self, coordinator: "ResumableDownloadCoordinator") -> None:
        if self.coordinator is not None:
            raise CoordinatorStateError("Coordinator already present in context")
        self.coordinator = coordinator

    def detach(self, coordinator: "ResumableDownloadCoordinator") -> None:
        if self.coordinator is not coordinator:
            raise CoordinatorStateError("Coordinator is not attached to this context")
        self.coordinator = None


class HttpResponse:
    """Status, headers and a lazily read body.

    The body is consumed with ``read``; ``release`` drops the underlying
    connection and is safe to call more than once.
    """

    def __init__(
        self,
        status: int,
        headers: CIMultiDictProxy[str] | CIMultiDict[str],
        content: ByteSource,
        *,
        url: str = "",
        reason: str | None = None,
        on_release: t.Callable[[], object] | None = None,
    ) -> None:
        self.status = status
        self.headers = headers
        self.content = content
        self.url = url
        self.reason = reason
        self._on_release = on_release
        self._released = False

    @classmethod
    def from_client_response(cls, response: aiohttp.ClientResponse) -> "HttpResponse":
        return cls(
            response.status,
            response.headers,
            response.content,
            url=str(response.url),
            reason=response.reason,
            on_release=response.close,
        )

    @classmethod
    def empty(cls, status: int = 206, url: str = "") -> "HttpResponse":
        """Response with no body, used when nothing is left to fetch."""
        return cls(status, CIMultiDict(), EmptyByteSource(), url=url)

    @property
    def released(self) -> bool:
        return self._released

    async def read(self, n: int = -1) -> bytes:
        return await self.content.read(n)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._on_release is not None:
            self._on_release()

    def __repr__(self) -> str:
        return f"<HttpResponse {self.status} {self.url}>"
