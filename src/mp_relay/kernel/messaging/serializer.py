"""Kernel messaging – event serializer port."""
from __future__ import annotations

import abc

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.messaging.serialized import SerializedEvent


class EventSerializer(abc.ABC):
    """Port: convert events to and from :class:`SerializedEvent` envelopes.

    Implementations raise :class:`~mp_relay.kernel.errors.SerializationError`
    on malformed payloads or unknown types and never drop data silently.
    """

    @abc.abstractmethod
    async def serialize(self, event: Event) -> SerializedEvent: ...

    @abc.abstractmethod
    async def deserialize(self, serialized: SerializedEvent) -> Event: ...


__all__ = ["EventSerializer"]
