"""SQLAlchemy adapter – SqlAlchemyUnitOfWork."""
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

from mp_relay.adapters.sqlalchemy.options import SqlAlchemyUnitOfWorkOptions
from mp_relay.adapters.sqlalchemy.schema import RelaySchema
from mp_relay.adapters.sqlalchemy.transaction import SqlTransactionCore
from mp_relay.kernel.ddd import DomainEvent, Event, IntegrationEvent, UnitOfWork
from mp_relay.kernel.messaging import EventSerializer
from mp_relay.kernel.time import Clock, SystemClock
from mp_relay.kernel.transactions import (
    NativeHandles,
    TransactionState,
    enter_scope,
    ensure_started,
    exit_scope,
)
from mp_relay.observability.logging import get_logger

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work writing outbox and inbox rows through SQLAlchemy Core.

    The store transaction comes from one of three places:

    * :meth:`begin` opens a connection from ``engine`` (or from
      ``options.connection_url``) and owns it;
    * :meth:`begin_with_connection` starts a transaction on a caller's
      connection and leaves the connection open afterwards;
    * :meth:`begin_with_transaction` joins a caller's transaction and
      never commits, rolls back or closes it.
    """

    def __init__(
        self,
        options: SqlAlchemyUnitOfWorkOptions,
        serializer: EventSerializer,
        *,
        engine: AsyncEngine | None = None,
        clock: Clock | None = None,
    ) -> None:
        if options is None:
            raise ValueError("options must not be None")
        if serializer is None:
            raise ValueError("serializer must not be None")
        self._options = options
        self._serializer = serializer
        self._schema = RelaySchema.for_options(options)
        self._core = SqlTransactionCore(
            source=type(self).__name__,
            schema=self._schema,
            clock=clock or SystemClock(),
            engine=engine,
            connection_url=options.connection_url,
        )
        self._published: list[Event] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> TransactionState:
        return self._core.state

    @property
    def native(self) -> NativeHandles | None:
        return self._core.native

    @property
    def schema(self) -> RelaySchema:
        return self._schema

    @property
    def published_events(self) -> Sequence[Event]:
        return tuple(self._published)

    # ------------------------------------------------------------------
    # Begin
    # ------------------------------------------------------------------

    async def begin(self) -> None:
        await self._core.start_owned()

    async def begin_with_connection(self, connection: AsyncConnection) -> None:
        await self._core.start_with_connection(connection)

    async def begin_with_transaction(self, transaction: AsyncTransaction) -> None:
        await self._core.start_with_transaction(transaction)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self, event: Event) -> None:
        if event is None:
            raise ValueError("event must not be None")
        ensure_started(self)

        if isinstance(event, IntegrationEvent):
            table = self._schema.outbox
        elif isinstance(event, DomainEvent):
            table = self._schema.inbox
        else:
            raise TypeError(
                f"{type(event).__name__} is neither a DomainEvent nor an IntegrationEvent"
            )

        timestamp = self._core.now()
        serialized = await self._serializer.serialize(event)

        await self._core.require_connection().execute(
            insert(table).values(
                source=self._core.source,
                timestamp=timestamp,
                type=serialized.type,
                data=serialized.data,
                taken=None,
            )
        )
        self._published.append(event)
        logger.debug("uow.event_published", event_type=serialized.type, table=table.name)

    # ------------------------------------------------------------------
    # Commit / rollback / fail
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        ensure_started(self)
        await self._core.finish_commit()

    async def rollback(self) -> None:
        self._core.enter_rollback("uow.rolling_back")
        try:
            await self._core.release()
        finally:
            self._core.complete_rollback()

    async def fail(self, error: BaseException | None) -> None:
        if error is None:
            await self.rollback()
            return

        logger.error("uow.transaction_failed", source=self._core.source, exc_info=error)
        record = self._core.in_flight
        self._core.enter_rollback("uow.rolling_back")
        try:
            await self._core.release()
        finally:
            try:
                if record:
                    await self._record_failure(error)
            finally:
                self._core.complete_rollback()

    async def _record_failure(self, error: BaseException) -> None:
        try:
            async with self._core.autonomous() as conn:
                await self._core.insert_failure(conn, error)
        except SQLAlchemyError:
            logger.exception("uow.failure_record_failed", source=self._core.source)

    # ------------------------------------------------------------------
    # Scoped use
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        return await enter_scope(self)

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await exit_scope(self, exc_val)


__all__ = ["SqlAlchemyUnitOfWork"]
