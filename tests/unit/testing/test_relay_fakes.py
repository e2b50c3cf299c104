"""Unit tests for the in-memory relay doubles."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import UTC, datetime, timedelta

import pytest

from mp_relay.kernel.ddd import DomainEvent, IntegrationEvent, UnitOfWork
from mp_relay.kernel.errors import IllegalStateError
from mp_relay.kernel.messaging import InboxQueue
from mp_relay.kernel.transactions import Transactional, TransactionState
from mp_relay.serialization import EventRegistry, JsonEventSerializer
from mp_relay.testing import (
    RELAY_EPOCH,
    FakeClock,
    InMemoryInboxQueue,
    InMemoryRelayStore,
    InMemoryUnitOfWork,
    RecordingDispatcher,
    stored,
)


@dataclasses.dataclass(frozen=True, kw_only=True)
class Pinged(DomainEvent):
    n: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class Ponged(IntegrationEvent):
    n: int


REGISTRY = EventRegistry()
REGISTRY.register(Pinged)
REGISTRY.register(Ponged)
SERIALIZER = JsonEventSerializer(REGISTRY)


class TestFakeClock:
    def test_pinned_to_relay_epoch(self) -> None:
        assert FakeClock().now() == RELAY_EPOCH
        assert RELAY_EPOCH.microsecond == 0

    def test_custom_instant(self) -> None:
        at = datetime(2026, 6, 1, 8, 0, tzinfo=UTC)
        assert FakeClock(at).now() == at

    def test_naive_instant_rejected(self) -> None:
        with pytest.raises(ValueError):
            FakeClock(datetime(2026, 6, 1, 8, 0))

    def test_stored_value_is_naive_utc(self) -> None:
        clock = FakeClock()
        clock.advance(minutes=10)
        assert stored(clock) == datetime(2026, 3, 2, 9, 40)


class TestInMemoryUnitOfWork:
    def test_implements_ports(self) -> None:
        uow = InMemoryUnitOfWork(InMemoryRelayStore(), SERIALIZER)
        assert isinstance(uow, UnitOfWork)
        assert isinstance(uow, Transactional)
        assert uow.native is None

    def test_rows_visible_only_after_commit(self) -> None:
        store = InMemoryRelayStore()

        async def run() -> None:
            uow = InMemoryUnitOfWork(store, SERIALIZER, clock=FakeClock())
            await uow.begin()
            await uow.publish(Pinged(n=1))
            await uow.publish(Ponged(n=2))
            assert store.inbox == [] and store.outbox == []
            await uow.commit()

        asyncio.run(run())
        assert [r.type for r in store.inbox] == ["Pinged"]
        assert [r.type for r in store.outbox] == ["Ponged"]
        assert store.inbox[0].source == "InMemoryUnitOfWork"
        assert store.inbox[0].id < store.outbox[0].id

    def test_rollback_discards(self) -> None:
        store = InMemoryRelayStore()

        async def run() -> InMemoryUnitOfWork:
            uow = InMemoryUnitOfWork(store, SERIALIZER)
            await uow.begin()
            await uow.publish(Pinged(n=1))
            await uow.rollback()
            return uow

        uow = asyncio.run(run())
        assert uow.state is TransactionState.ROLLED_BACK
        assert store.inbox == []

    def test_fail_records_failure(self) -> None:
        store = InMemoryRelayStore()

        async def run() -> None:
            async with InMemoryUnitOfWork(store, SERIALIZER) as uow:
                await uow.publish(Pinged(n=1))
                raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            asyncio.run(run())
        assert store.inbox == []
        assert len(store.failures) == 1
        assert "nope" in (store.failures[0].exception or "")

    def test_publish_requires_started(self) -> None:
        uow = InMemoryUnitOfWork(InMemoryRelayStore(), SERIALIZER)
        with pytest.raises(IllegalStateError):
            asyncio.run(uow.publish(Pinged(n=1)))


class TestInMemoryInboxQueue:
    def test_implements_ports(self) -> None:
        queue = InMemoryInboxQueue(InMemoryRelayStore(), SERIALIZER)
        assert isinstance(queue, InboxQueue)
        assert queue.native is None

    def test_lease_commit_and_expiry(self) -> None:
        store = InMemoryRelayStore()
        clock = FakeClock()
        delay = timedelta(seconds=1)

        async def run() -> None:
            async with InMemoryUnitOfWork(store, SERIALIZER) as uow:
                await uow.publish(Pinged(n=1))

            a = InMemoryInboxQueue(store, SERIALIZER, non_graceful_retry_delay=delay, clock=clock)
            await a.begin()
            assert a.current_event == Pinged(
                n=1, event_id=a.current_event.event_id, occurred_at=a.current_event.occurred_at  # type: ignore[union-attr]
            )

            clock.advance(seconds=0.5)
            b = InMemoryInboxQueue(store, SERIALIZER, non_graceful_retry_delay=delay, clock=clock)
            await b.begin()
            assert b.current_event is None
            await b.rollback()

            clock.advance(seconds=1)
            c = InMemoryInboxQueue(store, SERIALIZER, non_graceful_retry_delay=delay, clock=clock)
            await c.begin()
            assert c.current_event is not None
            await c.commit()

        asyncio.run(run())
        assert store.inbox == []

    def test_rollback_releases_lease(self) -> None:
        store = InMemoryRelayStore()

        async def run() -> None:
            async with InMemoryUnitOfWork(store, SERIALIZER) as uow:
                await uow.publish(Pinged(n=1))
            queue = InMemoryInboxQueue(store, SERIALIZER)
            await queue.begin()
            assert store.inbox[0].taken is not None
            await queue.rollback()

        asyncio.run(run())
        assert store.inbox[0].taken is None

    def test_fail_moves_event_to_failures(self) -> None:
        store = InMemoryRelayStore()

        async def run() -> None:
            async with InMemoryUnitOfWork(store, SERIALIZER) as uow:
                await uow.publish(Pinged(n=1))
            queue = InMemoryInboxQueue(store, SERIALIZER)
            await queue.begin()
            await queue.fail(ValueError("bad"))

        asyncio.run(run())
        assert store.inbox == []
        assert store.failures[0].event_type == "Pinged"
        assert store.failures[0].event_data is not None


class TestRecordingDispatcher:
    def test_records_and_fails_selected_types(self) -> None:
        dispatcher = RecordingDispatcher(Ponged)
        asyncio.run(dispatcher.dispatch(Pinged(n=1)))
        with pytest.raises(RuntimeError):
            asyncio.run(dispatcher.dispatch(Ponged(n=2)))
        assert [type(e) for e in dispatcher.dispatched] == [Pinged, Ponged]
        dispatcher.clear()
        assert dispatcher.dispatched == []
