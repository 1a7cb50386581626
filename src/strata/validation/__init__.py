"""Checksum verification for objects written to disk."""

from .base import BaseChecksumValidator
from .validator import ChecksumValidator

__all__ = ["BaseChecksumValidator", "ChecksumValidator"]
