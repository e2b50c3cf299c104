"""Testing fakes – in-memory doubles for kernel ports."""
from mp_relay.testing.fakes.clock import RELAY_EPOCH, FakeClock, stored
from mp_relay.testing.fakes.dispatcher import RecordingDispatcher
from mp_relay.testing.fakes.relay import InMemoryInboxQueue, InMemoryRelayStore, InMemoryUnitOfWork

__all__ = [
    "FakeClock",
    "InMemoryInboxQueue",
    "InMemoryRelayStore",
    "InMemoryUnitOfWork",
    "RELAY_EPOCH",
    "RecordingDispatcher",
    "stored",
]
