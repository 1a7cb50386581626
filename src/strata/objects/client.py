"""Object store client with resumable downloads."""

import asyncio
import os
import tempfile
import typing as t
import uuid
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import aiohttp
from aiohttp.typedefs import LooseHeaders
from multidict import CIMultiDict

from ..config import Settings
from ..domain.exceptions import HashMismatchError
from ..domain.failures import ContinuationPolicy
from ..domain.hash_validation import HashAlgorithm, HashConfig
from ..domain.retry import RetryConfig
from ..events import (
    BaseEmitter,
    DownloadCompletedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    ErrorInfo,
    NullEmitter,
)
from ..infrastructure.http import AiohttpClient, OutgoingRequest, RequestContext
from ..infrastructure.logging import get_logger
from ..resumable import (
    ContinuingStream,
    CoordinatorState,
    DownloadContinuator,
    DownloadErrorClassifier,
    ResumableDownloadCoordinator,
    ResumableRequestHook,
    ResumableResponseHook,
)
from ..retry import RetryHandler
from ..validation import BaseChecksumValidator, ChecksumValidator

if t.TYPE_CHECKING:
    import loguru


class ObjectStoreClient:
    """Reads objects from an HTTP object store.

    Downloads are resumable by default: when the connection drops part way
    through a body, the client asks the server for exactly the bytes that
    are still missing, as long as the object has not changed in between.

    Usage:
        async with ObjectStoreClient(Settings(base_url="https://store")) as store:
            text = await store.get_as_string("docs/readme.txt")
            path = await store.get_to_path("images/logo.png", Path("./out"))

    Args:
        settings: Client settings. Defaults to ``Settings()``.
        client: Transport to use instead of building one. It is not closed by
            this client, and must carry the resumable hooks for downloads to
            be continued.
        emitter: Receives download and retry events.
        validator: Verifies checksums for ``get_to_path``.
        policy: Fine-tunes which read failures are fatal.
        logger: Logger for download lifecycle messages.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: AiohttpClient | None = None,
        emitter: BaseEmitter | None = None,
        validator: BaseChecksumValidator | None = None,
        policy: ContinuationPolicy | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self._settings = settings or Settings()
        self._emitter = emitter or NullEmitter()
        self._validator = validator or ChecksumValidator(
            chunk_size=self._settings.chunk_size
        )
        self._classifier = DownloadErrorClassifier(policy)
        self._logger = logger
        self._owns_client = client is None
        self._client = client or self._build_client()
        self._hooks_installed = _has_resumable_hooks(self._client)

    async def __aenter__(self) -> "ObjectStoreClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def open(self) -> None:
        if self._owns_client:
            await self._client.open()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.close()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def client(self) -> AiohttpClient:
        return self._client

    @property
    def emitter(self) -> BaseEmitter:
        return self._emitter

    def resolve_url(self, path: str) -> str:
        """Turn an object path into a URL, leaving absolute URLs untouched.

        Raises:
            ValueError: If ``path`` is relative and no base_url is configured.
        """
        if urlparse(path).scheme in ("http", "https"):
            return path
        if not self._settings.base_url:
            raise ValueError(f"No base_url configured to resolve object path [{path}]")
        return f"{self._settings.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def get_object(
        self,
        path: str,
        *,
        headers: LooseHeaders | None = None,
        resumable: bool | None = None,
    ) -> ContinuingStream:
        """Start downloading an object and return a stream over its body.

        Args:
            path: Object path, or an absolute URL.
            headers: Extra request headers. A single ``Range`` and ``If-Match``
                are honoured and kept across continuations.
            resumable: Set False to turn continuations off for this download.

        Returns:
            The body stream. Close it, or use it with ``async with``.

        Raises:
            IncompatibleRequestError: If the headers cannot be used with a
                resumable download.
            UnexpectedResponseError: If the response headers are malformed or
                contradict the request.
            aiohttp.ClientError: If the request itself fails.
        """
        return await self._open_stream(path, headers=headers, resumable=resumable)

    async def get_as_bytes(
        self, path: str, *, headers: LooseHeaders | None = None
    ) -> bytes:
        async with await self.get_object(path, headers=headers) as stream:
            return await stream.read()

    async def get_as_string(
        self,
        path: str,
        encoding: str = "utf-8",
        *,
        headers: LooseHeaders | None = None,
    ) -> str:
        data = await self.get_as_bytes(path, headers=headers)
        return data.decode(encoding)

    async def get_to_path(
        self,
        path: str,
        destination: Path | None = None,
        *,
        hash_config: HashConfig | None = None,
        verify_checksum: bool = False,
        headers: LooseHeaders | None = None,
    ) -> Path:
        """Download an object to a file.

        The file is removed again if the download or the checksum check fails.

        Args:
            path: Object path, or an absolute URL.
            destination: Target file, or a directory to place the object in.
                Defaults to ``settings.download_dir``.
            hash_config: Checksum the file must match.
            verify_checksum: Without a hash_config, check the file against the
                response's Content-MD5 header when the server sends one.
            headers: Extra request headers.

        Returns:
            Path of the written file.

        Raises:
            HashMismatchError: If the file does not match the checksum.
            ResumableDownloadError: If the download could not be completed.
            OSError: If the file cannot be written.
        """
        url = self.resolve_url(path)
        destination = await self._resolve_destination(url, destination)

        stream: ContinuingStream | None = None
        try:
            await aiofiles.os.makedirs(destination.parent, exist_ok=True)
            stream = await self._open_stream(
                url, headers=headers, resumable=None, report_outcome=False
            )
            async with stream, aiofiles.open(destination, "wb") as file_handle:
                if hash_config is None and verify_checksum:
                    hash_config = self._content_md5(stream)
                async for chunk in stream:
                    await file_handle.write(chunk)

            if hash_config is not None:
                await self._validator.validate(destination, hash_config)

        except asyncio.CancelledError:
            await self._cleanup_partial_file(destination)
            self._logger.debug(f"Download cancelled, cleaned up: {destination}")
            raise

        except Exception as exc:
            await self._cleanup_partial_file(destination)
            if isinstance(exc, HashMismatchError):
                self._logger.error(f"Checksum verification failed for {url}: {exc}")
            await self._emitter.emit(
                "download.failed",
                DownloadFailedEvent(
                    download_id=stream.download_id if stream else str(uuid.uuid4()),
                    url=url,
                    error=ErrorInfo.from_exception(exc),
                    bytes_delivered=stream.bytes_read if stream else 0,
                ),
            )
            raise

        self._logger.debug(f"Downloaded {url} -> {destination}")
        await self._emitter.emit(
            "download.completed",
            DownloadCompletedEvent(
                download_id=stream.download_id,
                url=url,
                destination_path=str(destination),
                total_bytes=stream.bytes_read,
            ),
        )
        return destination

    async def get_to_temp_path(
        self, path: str, *, headers: LooseHeaders | None = None
    ) -> Path:
        """Download an object to a new temporary file and return its path.

        The caller owns the file and must delete it.
        """
        suffix = PurePosixPath(urlparse(self.resolve_url(path)).path).suffix
        fd, name = await asyncio.to_thread(
            tempfile.mkstemp, prefix="strata-", suffix=suffix
        )
        await asyncio.to_thread(os.close, fd)
        return await self.get_to_path(path, Path(name), headers=headers)

    async def _open_stream(
        self,
        path: str,
        *,
        headers: LooseHeaders | None,
        resumable: bool | None,
        report_outcome: bool = True,
    ) -> ContinuingStream:
        url = self.resolve_url(path)
        download_id = str(uuid.uuid4())
        request_headers: CIMultiDict[str] = CIMultiDict(headers or {})
        context = RequestContext()

        coordinator: ResumableDownloadCoordinator | None = None
        if self._continuations_enabled(resumable):
            request_headers.setdefault("Accept-Encoding", "identity")
            coordinator = ResumableDownloadCoordinator(
                context, classifier=self._classifier
            )

        try:
            response = await self._client.request(
                "GET", url, headers=request_headers, context=context
            )
        except Exception as exc:
            if (
                coordinator is not None
                and coordinator.state is not CoordinatorState.CANCELLED
            ):
                coordinator.cancel()
            self._logger.error(f"Request for {url} failed: {exc}")
            if report_outcome:
                await self._emitter.emit(
                    "download.failed",
                    DownloadFailedEvent(
                        download_id=download_id,
                        url=url,
                        error=ErrorInfo.from_exception(exc),
                    ),
                )
            raise

        continuator: DownloadContinuator | None = None
        if coordinator is not None and coordinator.marker is not None:
            continuator = DownloadContinuator(
                self._client,
                OutgoingRequest("GET", url, request_headers),
                coordinator,
                download_id=download_id,
                max_continuations=self._settings.max_continuations,
                emitter=self._emitter,
            )
            total_bytes: int | None = coordinator.marker.total_range_size
        else:
            total_bytes = _content_length(response.headers)

        await self._emitter.emit(
            "download.started",
            DownloadStartedEvent(
                download_id=download_id,
                url=url,
                total_bytes=total_bytes,
                resumable=continuator is not None,
            ),
        )

        return ContinuingStream(
            response,
            download_id=download_id,
            continuator=continuator,
            url=url,
            total_bytes=total_bytes,
            chunk_size=self._settings.chunk_size,
            report_outcome=report_outcome,
            emitter=self._emitter,
        )

    def _continuations_enabled(self, resumable: bool | None) -> bool:
        if resumable is False or not self._settings.continuations_enabled:
            return False
        if not self._hooks_installed:
            self._logger.warning(
                "Transport has no resumable download hooks registered, "
                "download continuations disabled"
            )
            return False
        return True

    def _content_md5(self, stream: ContinuingStream) -> HashConfig | None:
        # Only a full-object response carries the object's own digest
        if stream.response.status != 200:
            return None
        digest = stream.response.headers.get("Content-MD5")
        if digest is None:
            self._logger.debug(f"No Content-MD5 sent for {stream.url}, skipping check")
            return None
        return HashConfig.from_base64_digest(HashAlgorithm.MD5, digest)

    async def _resolve_destination(self, url: str, destination: Path | None) -> Path:
        target = destination if destination is not None else self._settings.download_dir
        if destination is None or await aiofiles.os.path.isdir(target):
            return target / (PurePosixPath(urlparse(url).path).name or "download")
        return target

    async def _cleanup_partial_file(self, file_path: Path) -> None:
        try:
            if await aiofiles.os.path.exists(file_path):
                await aiofiles.os.remove(file_path)
                self._logger.debug(f"Cleaned up partial file: {file_path}")
        except OSError as cleanup_error:
            # The download error is the one worth reporting
            self._logger.warning(
                f"Failed to clean up partial file {file_path}: {cleanup_error}"
            )

    def _build_client(self) -> AiohttpClient:
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self._settings.timeout,
            sock_read=self._settings.timeout,
        )
        return AiohttpClient(
            timeout=timeout,
            retry_handler=RetryHandler(
                RetryConfig(max_retries=self._settings.max_retries),
                emitter=self._emitter,
            ),
            request_hooks=[ResumableRequestHook()],
            response_hooks=[ResumableResponseHook()],
        )


def _has_resumable_hooks(client: AiohttpClient) -> bool:
    return any(
        isinstance(hook, ResumableRequestHook) for hook in client.request_hooks
    ) and any(isinstance(hook, ResumableResponseHook) for hook in client.response_hooks)


def _content_length(headers: t.Mapping[str, str]) -> int | None:
    raw = headers.get("Content-Length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)
