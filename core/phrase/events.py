"""Events dispatched by the Phrase provider around reads and writes.

Listeners receive the event and may replace its bag: the provider continues with whatever
bag the event holds once every listener has run.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.catalogue_models import TranslatorBag

__all__: list[str] = ["EventDispatcher", "Listener", "PhraseEvent", "ReadEvent", "WriteEvent"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class PhraseEvent:
    """Event carrying a translator bag that listeners can inspect or replace."""

    def __init__(self, bag: TranslatorBag) -> None:
        self._bag: TranslatorBag = bag

    @property
    def bag(self) -> TranslatorBag:
        return self._bag

    @bag.setter
    def bag(self, bag: TranslatorBag) -> None:
        self._bag = bag

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(bag={self._bag!r})"


class ReadEvent(PhraseEvent):
    """Dispatched after every catalogue of a read has been downloaded."""


class WriteEvent(PhraseEvent):
    """Dispatched before a write uploads anything."""


EventT = TypeVar("EventT", bound=PhraseEvent)
Listener = Callable[[Any], Awaitable[None] | None]


class EventDispatcher:
    """Calls listeners registered per event class, in registration order.

    Coroutine listeners are awaited; plain callables are called directly.
    """

    def __init__(self) -> None:
        self._listeners: dict[type[PhraseEvent], list[Listener]] = {}

    def add_listener(self, event_type: type[PhraseEvent], listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)
        logger.debug("Added listener %r for %s", listener, event_type.__name__)

    def remove_listener(self, event_type: type[PhraseEvent], listener: Listener) -> None:
        listeners: list[Listener] = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event_type: type[PhraseEvent]) -> list[Listener]:
        return list(self._listeners.get(event_type, []))

    async def dispatch(self, event: EventT) -> EventT:
        """Run the listeners of the event's class and return the event."""
        for listener in self.listeners(type(event)):
            result: Awaitable[None] | None = listener(event)
            if inspect.isawaitable(result):
                await result
        return event
