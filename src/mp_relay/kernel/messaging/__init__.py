"""Kernel messaging – envelopes, serializer port, inbox ports, guarantees."""
from mp_relay.kernel.messaging.guarantees import DuplicateAvoidance, OrderPreservation
from mp_relay.kernel.messaging.inbox import EventLeaser, InboxDispatcher, InboxQueue
from mp_relay.kernel.messaging.records import FailureRecord, RelayRecord
from mp_relay.kernel.messaging.serialized import SerializedEvent
from mp_relay.kernel.messaging.serializer import EventSerializer

__all__ = [
    "DuplicateAvoidance",
    "EventLeaser",
    "EventSerializer",
    "FailureRecord",
    "InboxDispatcher",
    "InboxQueue",
    "OrderPreservation",
    "RelayRecord",
    "SerializedEvent",
]
