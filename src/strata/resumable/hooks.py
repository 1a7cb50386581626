"""Transport hooks that route each exchange through the download's coordinator.

The hooks keep no state. Everything they touch lives in the coordinator
carried by the request context, so one pair of hooks serves any number of
concurrent downloads.
"""

from ..infrastructure.http.exchange import HttpResponse, OutgoingRequest, RequestContext
from ..infrastructure.http.hooks import BaseRequestHook, BaseResponseHook


class ResumableRequestHook(BaseRequestHook):
    """Lets the coordinator validate and stamp each outgoing request."""

    async def before_send(
        self, request: OutgoingRequest, context: RequestContext
    ) -> None:
        if context.coordinator is not None:
            context.coordinator.prepare(request)


class ResumableResponseHook(BaseResponseHook):
    """Lets the coordinator build or check its marker before the body is read."""

    async def after_receive(
        self, response: HttpResponse, context: RequestContext
    ) -> None:
        if context.coordinator is not None:
            context.coordinator.on_response(response)
