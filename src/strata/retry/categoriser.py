"""Categorise failed request exchanges for retry decisions."""

import asyncio

import aiohttp

from ..domain.retry import ErrorCategory, RetryPolicy


class ErrorCategoriser:
    """Decides whether a failed request exchange is worth sending again."""

    def __init__(self, policy: RetryPolicy) -> None:
        self._policy = policy

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def categorise(self, error: BaseException) -> ErrorCategory:
        match error:
            case aiohttp.ClientResponseError(status=status):
                return self._categorise_status(status)

            # Certificate problems will not fix themselves; checked before
            # ClientConnectorError, which it subclasses
            case aiohttp.ClientSSLError():
                return ErrorCategory.PERMANENT

            case (
                asyncio.TimeoutError()
                | aiohttp.ClientConnectorError()
                | aiohttp.ClientOSError()
                | aiohttp.ServerDisconnectedError()
                | aiohttp.ClientPayloadError()
            ):
                return ErrorCategory.TRANSIENT

            # Local filesystem errors
            case OSError():
                return ErrorCategory.PERMANENT

            case _:
                return self._unknown()

    def is_transient(self, error: BaseException) -> bool:
        return self.categorise(error) == ErrorCategory.TRANSIENT

    def _categorise_status(self, status: int) -> ErrorCategory:
        if status in self._policy.permanent_status_codes:
            return ErrorCategory.PERMANENT
        if status in self._policy.transient_status_codes:
            return ErrorCategory.TRANSIENT
        return self._unknown()

    def _unknown(self) -> ErrorCategory:
        if self._policy.retry_unknown_errors:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.UNKNOWN
