"""Classify errors raised while reading a download body."""

import asyncio
import socket
import ssl

import aiohttp

from ..domain.failures import ContinuationPolicy, FailureKind


class DownloadErrorClassifier:
    """Decides whether a failed body read can be continued.

    Fatal failures mean the remote end cannot be reached at all, so a
    continuation request would fail the same way: unknown host, refused
    connection, TLS failure, and interrupted I/O. Any other transport error
    is recoverable. Exceptions that are not transport errors are reported as
    ``FailureKind.NOT_IO`` and must be propagated unchanged.
    """

    def __init__(self, policy: ContinuationPolicy | None = None) -> None:
        self._policy = policy or ContinuationPolicy()

    def classify(self, error: BaseException) -> FailureKind:
        match error:
            # DNS, refused connections and TLS failures; ClientConnectorError
            # covers the aiohttp variants of all three
            case (
                aiohttp.ClientConnectorError()
                | socket.gaierror()
                | ConnectionRefusedError()
                | ssl.SSLError()
            ):
                return FailureKind.FATAL

            # Interrupted I/O, including aiohttp read/connect timeouts
            case TimeoutError() | InterruptedError():
                if self._policy.timeouts_fatal:
                    return FailureKind.FATAL
                return FailureKind.RECOVERABLE

            case OSError() | aiohttp.ClientError() | asyncio.IncompleteReadError():
                return FailureKind.RECOVERABLE

            case _:
                return FailureKind.NOT_IO
