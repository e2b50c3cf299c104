"""Kernel messaging – inbox queue and dispatcher ports."""
from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable

from mp_relay.kernel.ddd.domain_event import Event
from mp_relay.kernel.messaging.guarantees import DuplicateAvoidance, OrderPreservation
from mp_relay.kernel.messaging.serialized import SerializedEvent
from mp_relay.kernel.transactions import NativeHandles, TransactionState


@runtime_checkable
class EventLeaser(Protocol):
    """Capability: expose the event leased by the current transaction."""

    @property
    def current_event(self) -> Event | None: ...

    @property
    def current_event_serialized(self) -> SerializedEvent | None: ...

    @property
    def order_preservation(self) -> OrderPreservation: ...

    @property
    def duplicate_avoidance(self) -> DuplicateAvoidance: ...


class InboxQueue(abc.ABC):
    """Port: lease-based dequeue of one pending inbox event per transaction.

    ``begin`` leases the oldest eligible event (or none). ``commit``
    removes it, ``rollback`` releases it for another attempt and ``fail``
    records the failure and removes it.

    ``current_event_serialized`` is for logging only and may contain
    sensitive data.
    """

    @property
    @abc.abstractmethod
    def state(self) -> TransactionState: ...

    @property
    @abc.abstractmethod
    def native(self) -> NativeHandles | None: ...

    @property
    @abc.abstractmethod
    def current_event(self) -> Event | None: ...

    @property
    @abc.abstractmethod
    def current_event_serialized(self) -> SerializedEvent | None: ...

    @property
    @abc.abstractmethod
    def order_preservation(self) -> OrderPreservation: ...

    @property
    @abc.abstractmethod
    def duplicate_avoidance(self) -> DuplicateAvoidance: ...

    @abc.abstractmethod
    async def begin(self) -> None: ...

    @abc.abstractmethod
    async def commit(self) -> None: ...

    @abc.abstractmethod
    async def rollback(self) -> None: ...

    @abc.abstractmethod
    async def fail(self, error: BaseException | None) -> None: ...


class InboxDispatcher(abc.ABC):
    """Port: hand a leased event to its handler(s)."""

    @abc.abstractmethod
    async def dispatch(self, event: Event) -> None: ...


__all__ = ["EventLeaser", "InboxDispatcher", "InboxQueue"]
