"""Automatic retries for request exchanges."""

from .base import BaseRetryHandler
from .categoriser import ErrorCategoriser
from .handler import RetryHandler
from .null import NullRetryHandler

__all__ = [
    "BaseRetryHandler",
    "ErrorCategoriser",
    "NullRetryHandler",
    "RetryHandler",
]
