"""Interface shared by the download event emitters."""

import typing as t
from abc import ABC, abstractmethod

EventHandler = t.Callable[[t.Any], t.Any]


class BaseEmitter(ABC):
    """Publishes download and retry events to subscribed handlers.

    Event types are dotted names such as ``download.continued``. Handlers
    may be plain functions or coroutine functions.
    """

    @abstractmethod
    def on(self, event_type: str, handler: EventHandler) -> None: ...

    @abstractmethod
    def off(self, event_type: str, handler: EventHandler) -> None: ...

    @abstractmethod
    async def emit(self, event_type: str, event_data: t.Any) -> None:
        """Deliver ``event_data`` to every handler of ``event_type``."""
