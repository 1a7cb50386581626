"""Factories for TLS contexts and connectors."""

import ssl
import typing as t

import aiohttp
import certifi


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context that trusts the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def create_secure_connector(
    ssl: ssl.SSLContext | None = None, **kwargs: t.Any
) -> aiohttp.TCPConnector:
    """Create a TCP connector with certificate verification enabled.

    Args:
        ssl: SSL context to use. Defaults to ``create_ssl_context()``.
        **kwargs: Passed through to ``aiohttp.TCPConnector`` (e.g. ``limit``).
    """
    return aiohttp.TCPConnector(ssl=ssl or create_ssl_context(), **kwargs)
