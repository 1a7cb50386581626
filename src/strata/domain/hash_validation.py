"""Checksums an object must match once it has been written to disk.

Object stores advertise digests in two shapes: as ``<algorithm>:<hex>``
strings supplied by callers, and as base64 in the ``Content-MD5`` response
header. Both end up as a ``HashConfig`` holding a lowercase hex digest.
"""

import base64
import binascii
import enum
import hashlib
import string
import typing as t

from pydantic import BaseModel, ConfigDict, Field, model_validator

_HEX_DIGITS: t.Final = frozenset(string.hexdigits.lower())


class HashAlgorithm(enum.StrEnum):
    """Digest algorithms available for verifying downloads."""

    MD5 = "md5"
    SHA256 = "sha256"
    SHA512 = "sha512"

    def new_hasher(self) -> t.Any:
        return hashlib.new(self.value)

    @property
    def hex_length(self) -> int:
        """Characters in a hex digest produced by this algorithm."""
        return self.new_hasher().digest_size * 2


class HashConfig(BaseModel):
    """Expected digest of a downloaded object."""

    model_config = ConfigDict(frozen=True)

    algorithm: HashAlgorithm = Field(description="Digest algorithm")
    expected_hash: str = Field(
        min_length=1, description="Expected digest as hexadecimal text"
    )

    @model_validator(mode="before")
    @classmethod
    def _lowercase_digest(cls, data: t.Any) -> t.Any:
        if isinstance(data, dict) and isinstance(data.get("expected_hash"), str):
            data = {**data, "expected_hash": data["expected_hash"].strip().lower()}
        return data

    @model_validator(mode="after")
    def _check_digest_shape(self) -> "HashConfig":
        if not set(self.expected_hash) <= _HEX_DIGITS:
            raise ValueError("Expected hash must be hexadecimal")
        if len(self.expected_hash) != self.algorithm.hex_length:
            raise ValueError(
                f"A {self.algorithm} digest has {self.algorithm.hex_length} hex "
                f"characters, got {len(self.expected_hash)}"
            )
        return self

    @classmethod
    def from_checksum_string(cls, checksum: str) -> "HashConfig":
        """Parse ``<algorithm>:<hex digest>``, e.g. ``sha256:9f86d0...``."""
        algorithm_name, separator, digest = checksum.partition(":")
        if not separator:
            raise ValueError("Checksum must be in format '<algorithm>:<hash>'")
        name = algorithm_name.strip().lower()
        if name not in {algorithm.value for algorithm in HashAlgorithm}:
            raise ValueError(f"Unsupported hash algorithm '{name}'")
        return cls(algorithm=HashAlgorithm(name), expected_hash=digest)

    @classmethod
    def from_base64_digest(cls, algorithm: HashAlgorithm, digest: str) -> "HashConfig":
        """Parse a base64 digest such as a ``Content-MD5`` header value."""
        try:
            raw = base64.b64decode(digest.strip(), validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 digest '{digest}'") from exc
        return cls(algorithm=algorithm, expected_hash=raw.hex())
