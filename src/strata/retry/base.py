"""Base interface for retry handlers."""

import typing as t
from abc import ABC, abstractmethod

T = t.TypeVar("T")


class BaseRetryHandler(ABC):
    """Abstract base class for retry handlers.

    Lets the transport swap exponential backoff for no retries at all, per
    request, without changing how the request is sent.
    """

    @abstractmethod
    async def execute_with_retry(
        self,
        operation: t.Callable[[], t.Awaitable[T]],
        url: str,
        max_retries: int | None = None,
    ) -> T:
        """Execute an async operation with retry logic.

        Args:
            operation: The async callable to execute.
            url: The URL associated with the operation, for logging and events.
            max_retries: Optional override for max retries (implementation-specific).

        Returns:
            The result of the operation.

        Raises:
            Exception: The last exception if all retries fail or on a permanent error.
        """
