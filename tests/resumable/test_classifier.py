"""Tests for DownloadErrorClassifier."""

import asyncio
import socket
import ssl

import aiohttp
import pytest
from aiohttp.client_reqrep import ConnectionKey

from strata.domain.failures import ContinuationPolicy, FailureKind
from strata.resumable import DownloadErrorClassifier

CONNECTION_KEY = ConnectionKey("store.test", 443, True, True, None, None, None)


@pytest.fixture
def classifier() -> DownloadErrorClassifier:
    return DownloadErrorClassifier()


class TestFatalErrors:
    @pytest.mark.parametrize(
        "error",
        [
            socket.gaierror("Name or service not known"),
            ConnectionRefusedError("refused"),
            ssl.SSLError("handshake failed"),
            aiohttp.ClientConnectorError(CONNECTION_KEY, OSError("unreachable")),
        ],
        ids=["dns", "refused", "tls", "connector"],
    )
    def test_unreachable_remote_is_fatal(self, classifier, error):
        """Failures that a new request would hit again are fatal."""
        assert classifier.classify(error) is FailureKind.FATAL

    @pytest.mark.parametrize(
        "error",
        [TimeoutError(), asyncio.TimeoutError(), aiohttp.ServerTimeoutError()],
    )
    def test_timeouts_fatal_by_default(self, classifier, error):
        assert classifier.classify(error) is FailureKind.FATAL

    def test_interrupted_io_is_fatal(self, classifier):
        assert classifier.classify(InterruptedError()) is FailureKind.FATAL


class TestRecoverableErrors:
    @pytest.mark.parametrize(
        "error",
        [
            aiohttp.ClientPayloadError("Response payload is not completed"),
            aiohttp.ServerDisconnectedError(),
            ConnectionResetError("reset by peer"),
            asyncio.IncompleteReadError(b"partial", 100),
            OSError("broken pipe"),
        ],
        ids=["payload", "disconnected", "reset", "incomplete", "oserror"],
    )
    def test_mid_body_failures_are_recoverable(self, classifier, error):
        assert classifier.classify(error) is FailureKind.RECOVERABLE

    def test_timeouts_recoverable_when_policy_allows(self):
        """Stalled reads can be resumed when configured."""
        classifier = DownloadErrorClassifier(ContinuationPolicy(timeouts_fatal=False))

        assert classifier.classify(TimeoutError()) is FailureKind.RECOVERABLE
        assert (
            classifier.classify(aiohttp.ServerTimeoutError())
            is FailureKind.RECOVERABLE
        )


class TestNonTransportErrors:
    @pytest.mark.parametrize(
        "error", [ValueError("bad"), KeyError("k"), RuntimeError("boom")]
    )
    def test_other_errors_are_not_io(self, classifier, error):
        """Errors that are not transport failures pass through untouched."""
        assert classifier.classify(error) is FailureKind.NOT_IO
