"""aiohttp based transport with request/response hooks and automatic retry."""

import typing as t

import aiohttp
from aiohttp.typedefs import LooseHeaders
from multidict import CIMultiDict

from ...domain.exceptions import ClientNotInitialisedError
from ...domain.retry import RetryPolicy
from ...retry import BaseRetryHandler, NullRetryHandler
from ..logging import get_logger
from .exchange import HttpResponse, OutgoingRequest, RequestContext
from .factories import create_secure_connector
from .hooks import BaseRequestHook, BaseResponseHook

if t.TYPE_CHECKING:
    import loguru


class AiohttpClient:
    """Executes requests over an aiohttp session.

    Every request runs the registered request hooks once, is sent through
    the retry handler, and then runs the response hooks before the response
    is returned with its body still unread. Retries are skipped when the
    request context disables them or the method is not idempotent.

    Usage:
        async with AiohttpClient() as client:
            response = await client.request("GET", url)
            data = await response.read()

    A provided session is used as-is and never closed by this client.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        connector_factory: t.Callable[[], aiohttp.BaseConnector] = (
            create_secure_connector
        ),
        timeout: aiohttp.ClientTimeout | None = None,
        retry_handler: BaseRetryHandler | None = None,
        retry_policy: RetryPolicy | None = None,
        request_hooks: t.Sequence[BaseRequestHook] = (),
        response_hooks: t.Sequence[BaseResponseHook] = (),
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """Initialise the client.

        Args:
            session: Existing session to borrow. If None, one is created on open().
            connector_factory: Builds the connector for an owned session.
            timeout: Timeout applied to every request. Defaults to aiohttp's.
            retry_handler: Retries failed exchanges. If None, nothing is retried.
            retry_policy: Decides which methods may be retried.
            request_hooks: Run, in order, before each request is sent.
            response_hooks: Run, in order, after each response arrives.
            logger: Logger for request tracing.
        """
        self._session = session
        self._owns_session = session is None
        self._connector_factory = connector_factory
        self._timeout = timeout
        self._retry_handler = retry_handler or NullRetryHandler()
        self._retry_policy = retry_policy or RetryPolicy()
        self._request_hooks = list(request_hooks)
        self._response_hooks = list(response_hooks)
        self._logger = logger

    async def __aenter__(self) -> "AiohttpClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def open(self) -> None:
        """Create the owned session. Does nothing if a session already exists."""
        if self._session is not None:
            return
        self._session = aiohttp.ClientSession(
            connector=self._connector_factory(),
            timeout=self._timeout or aiohttp.ClientTimeout(),
        )
        self._owns_session = True

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    @property
    def request_hooks(self) -> tuple[BaseRequestHook, ...]:
        return tuple(self._request_hooks)

    @property
    def response_hooks(self) -> tuple[BaseResponseHook, ...]:
        return tuple(self._response_hooks)

    @property
    def session(self) -> aiohttp.ClientSession:
        """The underlying session.

        Raises:
            ClientNotInitialisedError: If open() has not been called.
        """
        if self._session is None:
            raise ClientNotInitialisedError(
                "AiohttpClient not initialised, use 'async with' or call open()"
            )
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: LooseHeaders | None = None,
        context: RequestContext | None = None,
    ) -> HttpResponse:
        """Send a request and return the response with its body unread.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Request headers; repeated names are kept as given.
            context: Per-download context. A fresh one is used if None.

        Returns:
            The response. The caller must read or release it.

        Raises:
            aiohttp.ClientResponseError: For 4xx/5xx statuses, after retries.
            aiohttp.ClientError: For transport failures, after retries.
            Exception: Anything raised by a request or response hook.
        """
        session = self.session
        context = context if context is not None else RequestContext()
        outgoing = OutgoingRequest(method.upper(), url, CIMultiDict(headers or {}))

        for request_hook in self._request_hooks:
            await request_hook.before_send(outgoing, context)

        retry_handler = self._retry_handler
        if context.retry_disabled or not self._retry_policy.allows_method(
            outgoing.method
        ):
            retry_handler = NullRetryHandler()

        response = await retry_handler.execute_with_retry(
            lambda: self._send(session, outgoing), url=outgoing.url
        )

        try:
            for response_hook in self._response_hooks:
                await response_hook.after_receive(response, context)
        except BaseException:
            response.release()
            raise

        return response

    async def _send(
        self, session: aiohttp.ClientSession, request: OutgoingRequest
    ) -> HttpResponse:
        self._logger.debug(f"{request.method} {request.url}")
        client_response = await session.request(
            request.method, request.url, headers=request.headers
        )
        if client_response.status >= 400:
            # Releases the connection before raising
            client_response.raise_for_status()
        return HttpResponse.from_client_response(client_response)
