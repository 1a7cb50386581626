"""In-process event emitter supporting sync and async handlers."""

import inspect
import typing as t
from collections import defaultdict

from ..infrastructure.logging import get_logger
from .base import BaseEmitter, EventHandler

if t.TYPE_CHECKING:
    import loguru


class EventEmitter(BaseEmitter):
    """Dispatches events to subscribed handlers in registration order.

    A failing handler is logged and never stops the remaining handlers or
    the code that emitted the event.
    """

    def __init__(self, logger: "loguru.Logger" = get_logger(__name__)) -> None:
        self._logger = logger
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            self._logger.warning(f"Handler {handler} not found for event {event_type}")
            return
        handlers.remove(handler)

    async def emit(self, event_type: str, event_data: t.Any) -> None:
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers.get(event_type, [])):
            if inspect.iscoroutinefunction(handler):
                try:
                    await handler(event_data)
                except Exception as e:
                    self._logger.opt(exception=e).error(
                        f"Async handler {handler} failed for event {event_type}"
                    )
            else:
                try:
                    handler(event_data)
                except Exception:
                    self._logger.exception(
                        f"Handler {handler} failed for event {event_type}"
                    )
