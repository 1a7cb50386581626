"""Null Object implementation for retry handlers."""

import typing as t

from .base import BaseRetryHandler

T = t.TypeVar("T")


class NullRetryHandler(BaseRetryHandler):
    """Runs the operation exactly once.

    Used when retries are switched off for a request, such as the
    continuation requests of a resumable download.
    """

    async def execute_with_retry(
        self,
        operation: t.Callable[[], t.Awaitable[T]],
        url: str,
        max_retries: int | None = None,
    ) -> T:
        return await operation()
