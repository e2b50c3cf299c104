"""Repository port – aggregate persistence bound to a unit of work."""

from __future__ import annotations

import abc
from typing import Any, Generic, TypeVar

from mp_relay.kernel.ddd.aggregate import AggregateRoot
from mp_relay.kernel.ddd.unit_of_work import UnitOfWork

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)


class Repository(abc.ABC, Generic[TAggregate]):
    """Port: repository for aggregate roots.

    A repository never owns a transaction: it writes through the unit of
    work it was created with, and saving an aggregate publishes the events
    the aggregate raised into that same unit of work.
    """

    @property
    @abc.abstractmethod
    def unit_of_work(self) -> UnitOfWork: ...

    @abc.abstractmethod
    async def get(self, id: Any) -> TAggregate | None: ...  # noqa: A002

    @abc.abstractmethod
    async def save(self, aggregate: TAggregate) -> None: ...

    @abc.abstractmethod
    async def delete(self, aggregate: TAggregate) -> None: ...


__all__ = ["Repository"]
