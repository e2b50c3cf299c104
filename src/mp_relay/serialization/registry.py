"""Serialization – explicit event type registry.

Events are persisted with a stable string discriminator. The registry maps
each discriminator to its event class and the functions that turn the
class into a JSON-compatible dict and back. It is populated once at
start-up; there is no reflective type lookup at read time.
"""
from __future__ import annotations

import dataclasses
import types
import typing
from datetime import datetime
from typing import Any, Callable, Iterator, TypeVar, overload

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.errors import SerializationError

E = TypeVar("E", bound=type[Event])

Encoder = Callable[[Event], dict[str, Any]]
Decoder = Callable[[dict[str, Any]], Event]


def _is_datetime_hint(hint: Any) -> bool:
    if hint is datetime:
        return True
    if isinstance(hint, str):
        return "datetime" in {part.strip() for part in hint.split("|")}
    origin = typing.get_origin(hint)
    if origin in (typing.Union, types.UnionType):
        return any(arg is datetime for arg in typing.get_args(hint))
    return False


def dataclass_encoder(event: Event) -> dict[str, Any]:
    """Default encoder: the event's dataclass fields."""
    return dataclasses.asdict(event)


def dataclass_decoder(event_class: type[Event]) -> Decoder:
    """Build the default decoder for a dataclass event.

    ``datetime`` fields (including optional ones) are parsed from ISO-8601.
    """
    try:
        hints = typing.get_type_hints(event_class)
    except NameError:
        # locally defined annotation targets; fall back to the raw annotations
        hints = {f.name: f.type for f in dataclasses.fields(event_class)}
    datetime_fields = frozenset(
        f.name for f in dataclasses.fields(event_class) if _is_datetime_hint(hints.get(f.name))
    )

    def decode(payload: dict[str, Any]) -> Event:
        kwargs = dict(payload)
        for name in datetime_fields:
            value = kwargs.get(name)
            if isinstance(value, str):
                kwargs[name] = datetime.fromisoformat(value)
        return event_class(**kwargs)

    return decode


@dataclasses.dataclass(frozen=True)
class RegisteredEvent:
    name: str
    event_class: type[Event]
    encoder: Encoder
    decoder: Decoder


class EventRegistry:
    """Discriminator ↔ event class mapping.

    Usage::

        registry = EventRegistry()

        @registry.register
        @dataclasses.dataclass(frozen=True, kw_only=True)
        class OrderPlaced(DomainEvent):
            order_id: str

        registry.register(LegacyEvent, name="Orders.Legacy", decoder=decode_legacy)

    Discriminator lookup is case-insensitive.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, RegisteredEvent] = {}
        self._by_class: dict[type[Event], RegisteredEvent] = {}

    @overload
    def register(self, event_class: E) -> E: ...

    @overload
    def register(
        self,
        event_class: None = None,
        *,
        name: str | None = None,
        encoder: Encoder | None = None,
        decoder: Decoder | None = None,
    ) -> Callable[[E], E]: ...

    @overload
    def register(
        self,
        event_class: E,
        *,
        name: str | None = None,
        encoder: Encoder | None = None,
        decoder: Decoder | None = None,
    ) -> E: ...

    def register(
        self,
        event_class: Any = None,
        *,
        name: str | None = None,
        encoder: Encoder | None = None,
        decoder: Decoder | None = None,
    ) -> Any:
        """Register *event_class*; usable directly or as a class decorator."""

        def _register(cls: E) -> E:
            if not (isinstance(cls, type) and issubclass(cls, Event)):
                raise TypeError(f"{cls!r} is not an Event subclass")
            if encoder is None or decoder is None:
                if not dataclasses.is_dataclass(cls):
                    raise TypeError(
                        f"{cls.__name__} is not a dataclass; provide an encoder and a decoder"
                    )
            discriminator = name or cls.__name__
            key = discriminator.casefold()
            if key in self._by_name:
                raise ValueError(f"Event type '{discriminator}' is already registered")
            if cls in self._by_class:
                raise ValueError(f"{cls.__name__} is already registered")
            entry = RegisteredEvent(
                name=discriminator,
                event_class=cls,
                encoder=encoder or dataclass_encoder,
                decoder=decoder or dataclass_decoder(cls),
            )
            self._by_name[key] = entry
            self._by_class[cls] = entry
            return cls

        if event_class is None:
            return _register
        return _register(event_class)

    def for_event(self, event: Event) -> RegisteredEvent:
        entry = self._by_class.get(type(event))
        if entry is None:
            raise SerializationError(
                f"The event cannot be serialized. Type not registered: {type(event).__name__}",
                payload_type=type(event).__name__,
            )
        return entry

    def for_name(self, name: str) -> RegisteredEvent:
        entry = self._by_name.get(name.casefold())
        if entry is None:
            raise SerializationError(
                f"The event cannot be deserialized. Type not found: {name}",
                payload_type=name,
            )
        return entry

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item.casefold() in self._by_name
        return item in self._by_class

    def __iter__(self) -> Iterator[RegisteredEvent]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


__all__ = [
    "Decoder",
    "Encoder",
    "EventRegistry",
    "RegisteredEvent",
    "dataclass_decoder",
    "dataclass_encoder",
]
