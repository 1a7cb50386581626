"""HTTP transport infrastructure."""

from .client import AiohttpClient
from .exchange import (
    ByteSource,
    EmptyByteSource,
    HttpResponse,
    OutgoingRequest,
    RequestContext,
)
from .factories import create_secure_connector, create_ssl_context
from .hooks import BaseRequestHook, BaseResponseHook

__all__ = [
    "AiohttpClient",
    "BaseRequestHook",
    "BaseResponseHook",
    "ByteSource",
    "EmptyByteSource",
    "HttpResponse",
    "OutgoingRequest",
    "RequestContext",
    "create_secure_connector",
    "create_ssl_context",
]
