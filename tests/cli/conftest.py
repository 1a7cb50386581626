"""Shared fixtures for CLI tests."""

import pytest

from strata.cli.app import create_cli_app
from strata.cli.state import CLIState
from strata.objects import ObjectStoreClient


@pytest.fixture
def test_app(test_settings):
    """Provide CLI app with test settings injected."""
    return create_cli_app(settings=test_settings)


@pytest.fixture
def mock_client(mocker):
    """Provide a fully mocked ObjectStoreClient."""
    mock = mocker.AsyncMock(spec=ObjectStoreClient)
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = None
    return mock


@pytest.fixture
def cli_state_with_mock_client(test_settings, mock_client):
    """CLIState whose client factory returns the mocked client."""
    captured = {}

    def mock_client_factory(settings, **kwargs):
        captured.update(kwargs)
        return mock_client

    state = CLIState(test_settings, client_factory=mock_client_factory)
    state.factory_kwargs = captured
    return state


@pytest.fixture
def app_with_mock_client(cli_state_with_mock_client):
    """CLI app with mocked client factory for testing."""
    return create_cli_app(state=cli_state_with_mock_client)
