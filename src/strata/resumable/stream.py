"""Byte stream over a download body that survives mid-body connection failures."""

import typing as t

from ..domain.exceptions import StreamClosedError
from ..events import (
    BaseEmitter,
    DownloadCompletedEvent,
    DownloadFailedEvent,
    ErrorInfo,
    NullEmitter,
)
from ..infrastructure.http.exchange import HttpResponse
from ..infrastructure.logging import get_logger
from .continuator import DownloadContinuator

if t.TYPE_CHECKING:
    import loguru


class ContinuingStream:
    """Reads a response body, swapping in continuation bodies after failures.

    Without a continuator the stream is a plain body reader and the first
    read error propagates. With one, a failed read is handed to the
    continuator together with the number of bytes delivered so far, and
    reading carries on from the replacement response. Either way the caller
    sees one gap-free sequence of bytes or an exception.

    Once a read has failed for good, every later read raises
    ``StreamClosedError`` chained to the original failure.

    Usage:
        async with await client.get_object("reports/q3.csv") as stream:
            async for chunk in stream:
                ...
    """

    def __init__(
        self,
        response: HttpResponse,
        *,
        download_id: str,
        continuator: DownloadContinuator | None = None,
        url: str | None = None,
        total_bytes: int | None = None,
        chunk_size: int = 65536,
        report_outcome: bool = True,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """Initialise the stream.

        Args:
            response: Response whose body is read first.
            download_id: Identifier reported in events.
            continuator: Builds replacement bodies. None disables resumption.
            url: URL reported in events. Defaults to the response URL.
            total_bytes: Bytes the download is expected to deliver, if known.
            chunk_size: Read size used by ``read()`` and ``async for``.
            report_outcome: Emit download.completed and download.failed.
            emitter: Receives download events.
            logger: Logger for download failures.
        """
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got [{chunk_size}]")

        self._response = response
        self._download_id = download_id
        self._continuator = continuator
        self._url = url or response.url
        self._total_bytes = total_bytes
        self._chunk_size = chunk_size
        self._report_outcome = report_outcome
        self._emitter = emitter or NullEmitter()
        self._logger = logger

        self._bytes_read = 0
        self._at_eof = False
        self._closed = False
        self._finalised = False
        self._error: BaseException | None = None

    async def __aenter__(self) -> "ContinuingStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __aiter__(self) -> t.AsyncIterator[bytes]:
        return self.iter_chunked(self._chunk_size)

    @property
    def bytes_read(self) -> int:
        """Bytes delivered to the caller so far."""
        return self._bytes_read

    @property
    def total_bytes(self) -> int | None:
        return self._total_bytes

    @property
    def url(self) -> str:
        return self._url

    @property
    def download_id(self) -> str:
        return self._download_id

    @property
    def response(self) -> HttpResponse:
        """Response currently being read."""
        return self._response

    @property
    def resumable(self) -> bool:
        return self._continuator is not None

    @property
    def continuations(self) -> int:
        return self._continuator.continuations if self._continuator else 0

    @property
    def at_eof(self) -> bool:
        return self._at_eof

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes, or everything left if ``n`` is negative.

        Returns:
            The bytes read. An empty result means the download is complete.

        Raises:
            StreamClosedError: If the stream was closed or has already failed.
            FatalDownloadError: If the connection failed in a way that cannot
                be recovered from.
            ContinuationError: If a continuation could not be built.
            UnexpectedResponseError: If a continuation response does not
                match the download.
        """
        self._require_readable()

        if n < 0:
            chunks = []
            while chunk := await self._read_some(self._chunk_size):
                chunks.append(chunk)
            return b"".join(chunks)

        if n == 0:
            return b""
        return await self._read_some(n)

    async def iter_chunked(self, size: int) -> t.AsyncIterator[bytes]:
        """Yield chunks of at most ``size`` bytes until the download completes."""
        if size < 1:
            raise ValueError(f"Chunk size must be positive, got [{size}]")
        while chunk := await self.read(size):
            yield chunk

    async def aclose(self) -> None:
        """Release the current response and close the continuator. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._finalise()

    async def _read_some(self, n: int) -> bytes:
        if self._at_eof:
            return b""

        while True:
            try:
                data = await self._response.read(n)
            except Exception as exc:
                await self._recover(exc)
                continue
            break

        if not data:
            await self._complete()
            return b""

        self._bytes_read += len(data)
        return data

    async def _recover(self, error: Exception) -> None:
        if self._continuator is None:
            await self._fail(error)
            raise error

        try:
            replacement = await self._continuator.build_continuation(
                error, self._bytes_read
            )
        except Exception as exc:
            await self._fail(exc)
            raise

        previous, self._response = self._response, replacement
        previous.release()

    async def _complete(self) -> None:
        self._at_eof = True
        await self._finalise()
        if self._report_outcome:
            await self._emitter.emit(
                "download.completed",
                DownloadCompletedEvent(
                    download_id=self._download_id,
                    url=self._url,
                    total_bytes=self._bytes_read,
                ),
            )

    async def _fail(self, error: BaseException) -> None:
        self._error = error
        self._logger.error(
            f"Download of {self._url} aborted after {self._bytes_read} bytes: "
            f"{type(error).__name__}: {error}"
        )
        await self._finalise()
        if self._report_outcome:
            await self._emitter.emit(
                "download.failed",
                DownloadFailedEvent(
                    download_id=self._download_id,
                    url=self._url,
                    error=ErrorInfo.from_exception(error),
                    bytes_delivered=self._bytes_read,
                ),
            )

    async def _finalise(self) -> None:
        if self._finalised:
            return
        self._finalised = True
        self._response.release()
        if self._continuator is not None:
            await self._continuator.aclose()

    def _require_readable(self) -> None:
        if self._closed:
            raise StreamClosedError(f"Stream for {self._url} is closed")
        if self._error is not None:
            raise StreamClosedError(
                f"Download of {self._url} was aborted"
            ) from self._error
