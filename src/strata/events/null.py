"""Emitter used when nobody is listening for events."""

import typing as t

from .base import BaseEmitter, EventHandler


class NullEmitter(BaseEmitter):
    """Emitter that drops every event."""

    def on(self, event_type: str, handler: EventHandler) -> None:
        pass

    def off(self, event_type: str, handler: EventHandler) -> None:
        pass

    async def emit(self, event_type: str, event_data: t.Any) -> None:
        pass
