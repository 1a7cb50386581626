"""CLI state container."""

import typing as t

from ..config.settings import Settings
from ..events import BaseEmitter, EventEmitter
from ..objects import ObjectStoreClient

ClientFactory = t.Callable[..., ObjectStoreClient]


class CLIState:
    """Shared state for CLI commands.

    Holds the resolved Settings and builds the object store client each
    command runs against. Tests swap ``client_factory`` for a mock.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
    ):
        self.settings = settings
        self._client_factory = client_factory or ObjectStoreClient

    def create_emitter(self) -> EventEmitter:
        return EventEmitter()

    def create_client(self, emitter: BaseEmitter | None = None) -> ObjectStoreClient:
        return self._client_factory(self.settings, emitter=emitter)
