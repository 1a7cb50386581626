"""Interception points the transport runs around every exchange."""

from abc import ABC, abstractmethod

from .exchange import HttpResponse, OutgoingRequest, RequestContext


class BaseRequestHook(ABC):
    """Runs before a request is sent, and may change its headers."""

    @abstractmethod
    async def before_send(
        self, request: OutgoingRequest, context: RequestContext
    ) -> None:
        """Inspect or stamp an outgoing request.

        Raising aborts the request before any network I/O.
        """


class BaseResponseHook(ABC):
    """Runs after response headers arrive, before the body is handed out."""

    @abstractmethod
    async def after_receive(
        self, response: HttpResponse, context: RequestContext
    ) -> None:
        """Inspect a response.

        Raising releases the response and propagates to the caller.
        """
