"""Application inbox – EventHandler, HandlerDispatcher."""

from __future__ import annotations

import abc
import asyncio
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.errors import UnhandledEventError
from mp_relay.kernel.messaging import InboxDispatcher

E = TypeVar("E", bound=Event)


class EventHandler(abc.ABC, Generic[E]):
    """Handle a single event type."""

    @abc.abstractmethod
    async def handle(self, event: E) -> None: ...


HandlerLike = Union[EventHandler[Any], Callable[[Any], Awaitable[None]]]


class HandlerDispatcher(InboxDispatcher):
    """In-process dispatcher with fan-out via :func:`asyncio.gather`.

    Handlers are looked up by the exact event class. An event without any
    handler raises :class:`UnhandledEventError`, so the inbox queue records
    it as a failure instead of silently dropping it.

    Every handler runs to completion before the first error, in registration
    order, is raised; no handler outlives :meth:`dispatch`.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[Callable[[Any], Awaitable[None]]]] = {}

    def register(self, event_type: type[Event], handler: HandlerLike) -> None:
        if isinstance(handler, EventHandler):
            handler = handler.handle
        elif not callable(handler):
            raise TypeError(f"{handler!r} is not an event handler")
        self._handlers.setdefault(event_type, []).append(handler)

    def handles(self, event_type: type[Event]) -> bool:
        return bool(self._handlers.get(event_type))

    async def dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(type(event))
        if not handlers:
            raise UnhandledEventError(event.event_type)
        results = await asyncio.gather(*(h(event) for h in handlers), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result


__all__ = ["EventHandler", "HandlerDispatcher"]
