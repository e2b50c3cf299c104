"""Unit of Work port – transactional boundary for aggregate writes and their events."""

from __future__ import annotations

import abc
from typing import Protocol, Sequence, runtime_checkable

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.transactions import NativeHandles, TransactionState


@runtime_checkable
class EventPublisher(Protocol):
    """Capability: append events to the outbox/inbox of the current transaction."""

    async def publish(self, event: Event) -> None: ...

    @property
    def published_events(self) -> Sequence[Event]: ...


class UnitOfWork(abc.ABC):
    """Port: one write transaction plus the events published inside it.

    Integration events go to the outbox, domain events to the inbox; both
    are written in the same transaction as the aggregate changes, so either
    everything becomes visible on commit or nothing does.

    Usage::

        async with SqlAlchemyUnitOfWork(options, serializer) as uow:
            ...  # mutate aggregates on ``uow.native.connection``
            await uow.publish(OrderPlaced(order_id="42"))
    """

    @property
    @abc.abstractmethod
    def state(self) -> TransactionState: ...

    @property
    @abc.abstractmethod
    def native(self) -> NativeHandles | None: ...

    @property
    @abc.abstractmethod
    def published_events(self) -> Sequence[Event]:
        """Events successfully published in this transaction, in call order."""

    @abc.abstractmethod
    async def begin(self) -> None: ...

    @abc.abstractmethod
    async def commit(self) -> None: ...

    @abc.abstractmethod
    async def rollback(self) -> None: ...

    @abc.abstractmethod
    async def fail(self, error: BaseException | None) -> None: ...

    @abc.abstractmethod
    async def publish(self, event: Event) -> None: ...


__all__ = ["EventPublisher", "UnitOfWork"]
