"""Retry configuration for the transport's automatic request retries.

These settings govern how a failed request exchange is retried before any
response body is handed out. Body reads that fail mid-stream are resumed by
the continuation machinery instead, which turns this retry off per request.
"""

import enum
import random
from dataclasses import dataclass, field

_MIN_JITTERED_DELAY = 0.05


class ErrorCategory(enum.StrEnum):
    """Classification of request errors for retry decisions."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RetryPolicy:
    """Which failed requests may be sent again."""

    transient_status_codes: frozenset[int] = field(
        default_factory=lambda: frozenset(
            {
                408,  # Request Timeout
                429,  # Too Many Requests
                500,  # Internal Server Error
                502,  # Bad Gateway
                503,  # Service Unavailable
                504,  # Gateway Timeout
            }
        )
    )
    permanent_status_codes: frozenset[int] = field(
        default_factory=lambda: frozenset(
            {
                400,  # Bad Request
                401,  # Unauthorised
                403,  # Forbidden
                404,  # Not Found
                405,  # Method Not Allowed
                410,  # Gone
                412,  # Precondition Failed (If-Match no longer holds)
                416,  # Range Not Satisfiable
            }
        )
    )
    # Only idempotent methods are ever resent
    retryable_methods: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS"})
    retry_unknown_errors: bool = False

    def should_retry_status(self, status_code: int) -> bool:
        """Check if an HTTP status code should trigger a retry.

        Permanent codes take precedence over transient codes.
        """
        if status_code in self.permanent_status_codes:
            return False
        if status_code in self.transient_status_codes:
            return True
        return self.retry_unknown_errors

    def allows_method(self, method: str) -> bool:
        return method.upper() in self.retryable_methods


@dataclass(frozen=True)
class RetryConfig:
    """Exponential backoff settings for request retries.

    The wait before retry ``n`` (counting from 0) is
    ``base_delay * exponential_base ** n``, capped at ``max_delay``. With
    ``jitter`` the wait is spread by up to a quarter either way.
    """

    max_retries: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True
    policy: RetryPolicy = field(default_factory=RetryPolicy)

    def calculate_delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt``."""
        delay = min(self.base_delay * self.exponential_base**attempt, self.max_delay)
        if not self.jitter:
            return delay
        spread = delay / 4
        return max(_MIN_JITTERED_DELAY, random.uniform(delay - spread, delay + spread))
