"""Fixtures shared by the resumable download tests."""

import typing as t

import aiohttp
import pytest
from multidict import CIMultiDict

from strata.infrastructure.http import HttpResponse

OBJECT_URL = "http://store.test/bucket/object.bin"
ETAG = '"v1"'


class ScriptedBody:
    """Response body that fails with ``error`` once ``fail_after`` bytes are read."""

    def __init__(
        self,
        data: bytes,
        *,
        fail_after: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self._data = data
        self._limit = len(data) if fail_after is None else fail_after
        self._error = error or aiohttp.ClientPayloadError(
            "Response payload is not completed"
        )
        self._fails = fail_after is not None
        self.position = 0

    async def read(self, n: int = -1) -> bytes:
        if self.position >= self._limit:
            if self._fails:
                raise self._error
            return b""
        end = self._limit if n < 0 else min(self.position + n, self._limit)
        chunk = self._data[self.position : end]
        self.position = end
        return chunk


@pytest.fixture
def make_response() -> t.Callable[..., HttpResponse]:
    """Build an HttpResponse over a scripted body."""

    def _make(
        status: int = 200,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        *,
        fail_after: int | None = None,
        error: Exception | None = None,
        url: str = OBJECT_URL,
    ) -> HttpResponse:
        return HttpResponse(
            status,
            CIMultiDict(headers or {}),
            ScriptedBody(body, fail_after=fail_after, error=error),
            url=url,
        )

    return _make


@pytest.fixture
def payload() -> bytes:
    """A 100 byte object with recognisable content."""
    return bytes(range(100))
