"""High-level object store client."""

from .client import ObjectStoreClient

__all__ = ["ObjectStoreClient"]
