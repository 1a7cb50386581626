"""Retry handler for request exchanges that fail before a body is read."""

import asyncio
import typing as t

from ..domain.exceptions import RetryError
from ..domain.retry import ErrorCategory, RetryConfig
from ..events import BaseEmitter, NullEmitter, RequestRetryEvent
from ..infrastructure.logging import get_logger
from .base import BaseRetryHandler
from .categoriser import ErrorCategoriser

if t.TYPE_CHECKING:
    import loguru

T = t.TypeVar("T")


class RetryHandler(BaseRetryHandler):
    """Resends request exchanges that failed with a transient error.

    Only the exchange up to the response headers is covered. Failures while
    reading a body are the business of the resumable download machinery.

    Args:
        config: Attempt limit and backoff curve.
        logger: Logger for retry decisions.
        emitter: Receives a ``request.retry`` event before each wait.
            Events are dropped when omitted.
        categoriser: Sorts errors into transient and permanent. Built from
            ``config.policy`` when omitted.
    """

    def __init__(
        self,
        config: RetryConfig,
        logger: "loguru.Logger" = get_logger(__name__),
        emitter: BaseEmitter | None = None,
        categoriser: ErrorCategoriser | None = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self.emitter = emitter or NullEmitter()
        self.categoriser = categoriser or ErrorCategoriser(config.policy)

    async def execute_with_retry(
        self,
        operation: t.Callable[[], t.Awaitable[T]],
        url: str,
        max_retries: int | None = None,
    ) -> T:
        """Await ``operation`` until it succeeds or retrying stops making sense.

        Raises:
            Exception: Whatever ``operation`` raised last. Permanent and
                unknown errors propagate on the first occurrence.
        """
        limit = self.config.max_retries if max_retries is None else max_retries

        attempt = 0
        while attempt <= limit:
            try:
                return await operation()
            except Exception as exc:
                if not self._worth_retrying(exc, url, attempt, limit):
                    raise
                delay = self.config.calculate_delay(attempt)
                await self._announce(exc, url, attempt, limit, delay)
                await asyncio.sleep(delay)
            attempt += 1

        raise RetryError(f"No attempt was made for {url}, retry limit is {limit}")

    def _worth_retrying(
        self, error: Exception, url: str, attempt: int, limit: int
    ) -> bool:
        category = self.categoriser.categorise(error)
        if category is not ErrorCategory.TRANSIENT:
            self.logger.debug(
                f"Non-transient error ({category.value}) for {url}, "
                f"giving up: {error}"
            )
            return False
        if attempt >= limit:
            self.logger.error(f"Request failed after {limit} retries: {url}")
            return False
        return True

    async def _announce(
        self, error: Exception, url: str, attempt: int, limit: int, delay: float
    ) -> None:
        await self.emitter.emit(
            "request.retry",
            RequestRetryEvent(
                url=url,
                attempt=attempt + 1,
                max_retries=limit,
                error_message=str(error),
                retry_delay=delay,
            ),
        )
        self.logger.warning(
            f"Retrying request (attempt {attempt + 2}/{limit + 1}) "
            f"in {delay:.2f}s after {type(error).__name__}: {url}"
        )
