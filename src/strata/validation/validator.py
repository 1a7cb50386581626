"""Checksum validator that hashes files without blocking the event loop."""

import hmac
import typing as t
from pathlib import Path

import aiofiles
import aiofiles.os

from ..domain.exceptions import FileAccessError, HashMismatchError
from ..domain.hash_validation import HashConfig
from ..infrastructure.logging import get_logger
from .base import BaseChecksumValidator

if t.TYPE_CHECKING:
    import loguru


class ChecksumValidator(BaseChecksumValidator):
    """Hashes a file in chunks read through aiofiles."""

    def __init__(
        self,
        *,
        chunk_size: int = 65536,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self._chunk_size = chunk_size
        self._logger = logger

    async def validate(self, file_path: Path, config: HashConfig) -> str:
        if not await aiofiles.os.path.isfile(file_path):
            raise FileAccessError(f"No file to validate at {file_path}")

        try:
            actual_hash = await self.digest(file_path, config)
        except OSError as exc:
            raise FileAccessError(
                f"Unable to read file for validation: {file_path}"
            ) from exc

        if not hmac.compare_digest(actual_hash, config.expected_hash):
            raise HashMismatchError(
                expected_hash=config.expected_hash,
                actual_hash=actual_hash,
                file_path=file_path,
            )

        self._logger.debug(f"{config.algorithm} checksum verified for {file_path}")
        return actual_hash

    async def digest(self, file_path: Path, config: HashConfig) -> str:
        """Hex digest of the file with the configured algorithm."""
        hasher = config.algorithm.new_hasher()
        async with aiofiles.open(file_path, "rb") as handle:
            while chunk := await handle.read(self._chunk_size):
                hasher.update(chunk)
        return hasher.hexdigest()
