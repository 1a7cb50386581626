"""Interface for checksum verification of downloaded objects."""

from abc import ABC, abstractmethod
from pathlib import Path

from ..domain.hash_validation import HashConfig


class BaseChecksumValidator(ABC):
    """Verifies that a file written by a download has the expected checksum."""

    @abstractmethod
    async def validate(self, file_path: Path, config: HashConfig) -> str:
        """Check the file against ``config``.

        Returns:
            The calculated checksum, in lowercase hex.

        Raises:
            HashMismatchError: If the checksum differs from the expected one.
            FileAccessError: If the file is missing or unreadable.
        """
