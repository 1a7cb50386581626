"""Tests for the resumable transport hooks."""

import pytest
from aioresponses import aioresponses
from multidict import CIMultiDict
from yarl import URL

from strata.domain.exceptions import IncompatibleRequestError, UnexpectedResponseError
from strata.infrastructure.http import AiohttpClient, OutgoingRequest, RequestContext
from strata.resumable import (
    CoordinatorState,
    ResumableDownloadCoordinator,
    ResumableRequestHook,
    ResumableResponseHook,
)

OBJECT_URL = "http://store.test/bucket/object.bin"


@pytest.fixture
def hooked_client() -> AiohttpClient:
    return AiohttpClient(
        request_hooks=[ResumableRequestHook()],
        response_hooks=[ResumableResponseHook()],
    )


class TestHooksWithoutCoordinator:
    @pytest.mark.asyncio
    async def test_plain_requests_untouched(self, make_response):
        """Contexts without a coordinator pass straight through."""
        request = OutgoingRequest("POST", OBJECT_URL, CIMultiDict())
        context = RequestContext()

        await ResumableRequestHook().before_send(request, context)
        await ResumableResponseHook().after_receive(make_response(500), context)

        assert dict(request.headers) == {}


class TestHooksWithCoordinator:
    @pytest.mark.asyncio
    async def test_first_exchange_activates_coordinator(self, hooked_client):
        context = RequestContext()
        coordinator = ResumableDownloadCoordinator(context)

        with aioresponses() as mock:
            mock.get(
                OBJECT_URL,
                status=200,
                body=b"0123456789",
                headers={"ETag": '"v1"', "Content-Length": "10"},
            )
            async with hooked_client:
                response = await hooked_client.request(
                    "GET", OBJECT_URL, context=context
                )
                response.release()

        assert coordinator.state is CoordinatorState.ACTIVE
        assert coordinator.marker is not None
        assert coordinator.marker.total_range_size == 10

    @pytest.mark.asyncio
    async def test_duplicate_range_rejected_before_send(self, hooked_client):
        """Incompatible requests never reach the network."""
        context = RequestContext()
        ResumableDownloadCoordinator(context)

        with aioresponses() as mock:
            async with hooked_client:
                with pytest.raises(IncompatibleRequestError):
                    await hooked_client.request(
                        "GET",
                        OBJECT_URL,
                        headers=[("Range", "bytes=0-1"), ("Range", "bytes=2-3")],
                        context=context,
                    )

            assert not mock.requests

    @pytest.mark.asyncio
    async def test_mismatching_first_response_released(self, hooked_client):
        """A response contradicting If-Match is released and raised."""
        context = RequestContext()
        coordinator = ResumableDownloadCoordinator(context)

        with aioresponses() as mock:
            mock.get(
                OBJECT_URL,
                status=200,
                body=b"0123456789",
                headers={"ETag": '"v2"', "Content-Length": "10"},
            )
            async with hooked_client:
                with pytest.raises(UnexpectedResponseError):
                    await hooked_client.request(
                        "GET",
                        OBJECT_URL,
                        headers={"If-Match": '"v1"'},
                        context=context,
                    )

        assert coordinator.state is CoordinatorState.CANCELLED

    @pytest.mark.asyncio
    async def test_continuation_request_is_stamped(self, hooked_client):
        """Requests after the first carry the marker's If-Match and Range."""
        context = RequestContext()
        coordinator = ResumableDownloadCoordinator(context)

        with aioresponses() as mock:
            mock.get(
                OBJECT_URL,
                status=200,
                body=b"0123456789",
                headers={"ETag": '"v1"', "Content-Length": "10"},
            )
            mock.get(
                OBJECT_URL,
                status=206,
                body=b"456789",
                headers={"ETag": '"v1"', "Content-Range": "bytes 4-9/10"},
            )
            async with hooked_client:
                first = await hooked_client.request("GET", OBJECT_URL, context=context)
                first.release()
                coordinator.attempt_recovery(ConnectionResetError(), 4)
                second = await hooked_client.request(
                    "GET", OBJECT_URL, context=context
                )
                assert await second.read() == b"456789"
                second.release()

            sent = mock.requests[("GET", URL(OBJECT_URL))][1].kwargs["headers"]

        assert sent["Range"] == "bytes=4-9"
        assert sent["If-Match"] == '"v1"'
