"""Testing support – in-memory doubles for the relay ports.

Use them to test handlers and application services without a database::

    store = InMemoryRelayStore()
    async with InMemoryUnitOfWork(store, serializer) as uow:
        await uow.publish(OrderPlaced(order_id="42"))
    assert len(store.inbox) == 1
"""

from mp_relay.testing.fakes import (
    RELAY_EPOCH,
    FakeClock,
    InMemoryInboxQueue,
    InMemoryRelayStore,
    InMemoryUnitOfWork,
    RecordingDispatcher,
    stored,
)

__all__ = [
    "FakeClock",
    "InMemoryInboxQueue",
    "InMemoryRelayStore",
    "InMemoryUnitOfWork",
    "RELAY_EPOCH",
    "RecordingDispatcher",
    "stored",
]
