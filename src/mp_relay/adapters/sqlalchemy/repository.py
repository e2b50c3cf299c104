"""SQLAlchemy adapter – SqlAlchemyRepositoryBase."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_relay.adapters.sqlalchemy.session import bind_session
from mp_relay.kernel.ddd import AggregateRoot, Repository, UnitOfWork

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)


class SqlAlchemyRepositoryBase(Repository[TAggregate], Generic[TAggregate]):
    """Generic SQLAlchemy repository writing through a unit of work.

    The ORM session is bound lazily to the unit of work's connection, so the
    repository can be created before the unit of work begins. Saving an
    aggregate flushes it and publishes the events it raised into the same
    transaction.
    """

    def __init__(self, uow: UnitOfWork, model_class: type[TAggregate]) -> None:
        if uow is None:
            raise ValueError("uow must not be None")
        self._uow = uow
        self._model = model_class
        self._session: AsyncSession | None = None

    @property
    def unit_of_work(self) -> UnitOfWork:
        return self._uow

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            self._session = bind_session(self._uow)
        return self._session

    async def get(self, id: Any) -> TAggregate | None:  # noqa: A002
        return await self.session.get(self._model, id)

    async def save(self, aggregate: TAggregate) -> None:
        self.session.add(aggregate)
        await self.session.flush()
        for event in aggregate.pull_events():
            await self._uow.publish(event)

    async def delete(self, aggregate: TAggregate) -> None:
        await self.session.delete(aggregate)
        await self.session.flush()
        for event in aggregate.pull_events():
            await self._uow.publish(event)

    async def find_all(self) -> list[TAggregate]:
        result = await self.session.execute(select(self._model))
        return list(result.scalars().all())

    async def close(self) -> None:
        """Release the ORM session; call before the unit of work ends."""
        if self._session is not None:
            await self._session.close()
            self._session = None


__all__ = ["SqlAlchemyRepositoryBase"]
