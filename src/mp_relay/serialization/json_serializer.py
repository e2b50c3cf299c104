"""Serialization – JSON event serializer."""
from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.errors import SerializationError
from mp_relay.kernel.messaging import EventSerializer, SerializedEvent
from mp_relay.serialization.registry import EventRegistry


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonEventSerializer(EventSerializer):
    """Serialize events as JSON objects keyed by their registered discriminator."""

    def __init__(self, registry: EventRegistry, **json_kwargs: Any) -> None:
        self._registry = registry
        self._json_kwargs = json_kwargs

    @property
    def registry(self) -> EventRegistry:
        return self._registry

    async def serialize(self, event: Event) -> SerializedEvent:
        if event is None:
            raise ValueError("event must not be None")
        entry = self._registry.for_event(event)
        try:
            data = json.dumps(entry.encoder(event), default=_default, **self._json_kwargs)
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"The event cannot be serialized. Exception occurred: {exc}",
                payload_type=entry.name,
                cause=exc,
            ) from exc
        return SerializedEvent(entry.name, data)

    async def deserialize(self, serialized: SerializedEvent) -> Event:
        if serialized is None:
            raise ValueError("serialized must not be None")
        if not serialized.type or not serialized.type.strip():
            raise SerializationError("Serialized event type is null or empty.")
        if not serialized.data or not serialized.data.strip():
            raise SerializationError(
                "Serialized event data is null or empty.", payload_type=serialized.type
            )
        entry = self._registry.for_name(serialized.type)
        try:
            payload = json.loads(serialized.data)
        except ValueError as exc:
            raise SerializationError(
                f"The event cannot be deserialized. Exception occurred: {exc}",
                payload_type=entry.name,
                cause=exc,
            ) from exc
        if not isinstance(payload, dict):
            raise SerializationError(
                f"The event cannot be deserialized. Expected a JSON object, got {type(payload).__name__}",
                payload_type=entry.name,
            )
        try:
            event = entry.decoder(payload)
        except (TypeError, ValueError, KeyError) as exc:
            raise SerializationError(
                f"The event cannot be deserialized. Exception occurred: {exc}",
                payload_type=entry.name,
                cause=exc,
            ) from exc
        if not isinstance(event, Event):
            raise SerializationError(
                f"The event cannot be deserialized. Event is not of type Event: {type(event).__name__}",
                payload_type=entry.name,
            )
        return event


__all__ = ["JsonEventSerializer"]
