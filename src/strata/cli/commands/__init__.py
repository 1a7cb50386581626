"""CLI command implementations."""

from .cat import cat
from .get import get

__all__ = ["cat", "get"]
