"""Tests for transport request, response and context types."""

import pytest
from multidict import CIMultiDict

from strata.domain.exceptions import CoordinatorStateError
from strata.infrastructure.http import (
    EmptyByteSource,
    HttpResponse,
    OutgoingRequest,
    RequestContext,
)


class TestOutgoingRequest:
    def test_clone_copies_headers(self) -> None:
        """Changing a clone's headers leaves the original untouched."""
        original = OutgoingRequest("GET", "http://store.test/a", CIMultiDict(A="1"))

        clone = original.clone()
        clone.headers["A"] = "2"

        assert original.headers["A"] == "1"
        assert (clone.method, clone.url) == (original.method, original.url)

    def test_clone_keeps_repeated_headers(self) -> None:
        """Repeated header values survive cloning."""
        headers: CIMultiDict[str] = CIMultiDict()
        headers.add("X-Tag", "a")
        headers.add("X-Tag", "b")

        clone = OutgoingRequest("GET", "http://store.test/a", headers).clone()

        assert clone.headers.getall("X-Tag") == ["a", "b"]


class TestRequestContext:
    def test_attach_and_detach(self, mocker) -> None:
        """A context carries one coordinator at a time."""
        context = RequestContext()
        coordinator = mocker.sentinel.coordinator

        context.attach(coordinator)
        assert context.coordinator is coordinator

        context.detach(coordinator)
        assert context.coordinator is None

    def test_second_attach_rejected(self, mocker) -> None:
        """Attaching a second coordinator raises."""
        context = RequestContext()
        context.attach(mocker.sentinel.first)

        with pytest.raises(CoordinatorStateError, match="already present"):
            context.attach(mocker.sentinel.second)

    def test_detach_of_other_coordinator_rejected(self, mocker) -> None:
        """Only the attached coordinator can detach itself."""
        context = RequestContext()
        context.attach(mocker.sentinel.first)

        with pytest.raises(CoordinatorStateError, match="not attached"):
            context.detach(mocker.sentinel.second)

    def test_retries_enabled_by_default(self) -> None:
        assert RequestContext().retry_disabled is False


class TestHttpResponse:
    @pytest.mark.asyncio
    async def test_empty_response(self) -> None:
        """Empty responses are at EOF immediately."""
        response = HttpResponse.empty(url="http://store.test/a")

        assert response.status == 206
        assert await response.read() == b""
        assert isinstance(response.content, EmptyByteSource)

    def test_release_is_idempotent(self, mocker) -> None:
        """The release callback runs once."""
        on_release = mocker.Mock()
        response = HttpResponse(
            200, CIMultiDict(), EmptyByteSource(), on_release=on_release
        )

        response.release()
        response.release()

        assert response.released is True
        on_release.assert_called_once_with()

    def test_repr(self) -> None:
        response = HttpResponse.empty(status=200, url="http://store.test/a")
        assert repr(response) == "<HttpResponse 200 http://store.test/a>"
