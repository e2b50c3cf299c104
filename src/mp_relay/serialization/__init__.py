"""Serialization – event registry and JSON serializer."""
from mp_relay.serialization.json_serializer import JsonEventSerializer
from mp_relay.serialization.registry import (
    Decoder,
    Encoder,
    EventRegistry,
    RegisteredEvent,
    dataclass_decoder,
    dataclass_encoder,
)

__all__ = [
    "Decoder",
    "Encoder",
    "EventRegistry",
    "JsonEventSerializer",
    "RegisteredEvent",
    "dataclass_decoder",
    "dataclass_encoder",
]
