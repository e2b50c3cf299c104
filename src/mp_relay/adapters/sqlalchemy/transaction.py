"""SQLAlchemy adapter – connection ownership and bookkeeping shared by the relay transactions.

:class:`SqlTransactionCore` is composed into the unit of work and the inbox
queue. It tracks the state machine, the connection/transaction pair and who
owns it, and offers an *autonomous* connection: a separate, immediately
committed connection for writes that must survive a rollback of the primary
transaction (failure records, lease bookkeeping). When the primary
transaction belongs to the caller, bookkeeping joins it instead.
"""
from __future__ import annotations

import contextlib
import traceback
from typing import Any, AsyncIterator

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

from mp_relay.adapters.sqlalchemy.schema import RelaySchema
from mp_relay.adapters.sqlalchemy.session import engine_for
from mp_relay.kernel.errors import IllegalStateError, StoreError
from mp_relay.kernel.messaging import SerializedEvent
from mp_relay.kernel.time import Clock, to_naive_utc
from mp_relay.kernel.transactions import (
    NativeHandles,
    Transactional,
    TransactionState,
    ensure_startable,
    ensure_started,
)
from mp_relay.observability.logging import get_logger

logger = get_logger(__name__)

# Failing is only meaningful while the primary transaction is in flight.
_IN_FLIGHT = (TransactionState.STARTING, TransactionState.STARTED, TransactionState.COMMITTING)


def exception_detail(error: BaseException) -> str:
    """Full traceback text of *error*, chained causes included."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class SqlTransactionCore:
    """State and store handles of one relay transaction."""

    def __init__(
        self,
        *,
        source: str,
        schema: RelaySchema,
        clock: Clock,
        engine: AsyncEngine | None = None,
        connection_url: str | None = None,
    ) -> None:
        self.source = source
        self.schema = schema
        self.clock = clock
        self.state = TransactionState.NOT_STARTED
        self._engine = engine
        self._connection_url = connection_url
        self.connection: AsyncConnection | None = None
        self.transaction: AsyncTransaction | None = None
        self.is_external_connection: bool | None = None
        self.is_external_transaction: bool | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @property
    def native(self) -> NativeHandles | None:
        if self.connection is None:
            return None
        return NativeHandles(
            connection=self.connection,
            transaction=self.transaction,
            is_external_connection=bool(self.is_external_connection),
            is_external_transaction=bool(self.is_external_transaction),
        )

    @property
    def in_flight(self) -> bool:
        return self.state in _IN_FLIGHT and self._engine is not None

    def now(self) -> Any:
        return to_naive_utc(self.clock.now())

    def require_connection(self) -> AsyncConnection:
        ensure_started(self)
        assert self.connection is not None
        return self.connection

    # ------------------------------------------------------------------
    # Begin
    # ------------------------------------------------------------------

    async def start_owned(self) -> None:
        ensure_startable(self)
        if self._engine is None:
            if not self._connection_url or not self._connection_url.strip():
                raise StoreError("No connection string is provided.")
            self._engine = engine_for(self._connection_url)

        self.state = TransactionState.STARTING
        self.connection = await self._engine.connect()
        self.transaction = await self.connection.begin()
        self.is_external_connection = False
        self.is_external_transaction = False
        self.state = TransactionState.STARTED

    async def start_with_connection(self, connection: AsyncConnection) -> None:
        if connection is None:
            raise ValueError("connection must not be None")
        ensure_startable(self)
        if connection.sync_connection is not None and connection.closed:
            raise StoreError("The supplied connection is closed.")

        self.state = TransactionState.STARTING
        self._engine = connection.engine
        self.connection = connection
        if connection.sync_connection is None:
            await connection.start()
        self.transaction = await connection.begin()
        self.is_external_connection = True
        self.is_external_transaction = False
        self.state = TransactionState.STARTED

    async def start_with_transaction(self, transaction: AsyncTransaction) -> None:
        if transaction is None:
            raise ValueError("transaction must not be None")
        ensure_startable(self)
        if not transaction.is_active:
            raise StoreError("The supplied transaction is not active.")

        self.state = TransactionState.STARTING
        self.connection = transaction.connection
        self._engine = transaction.connection.engine
        self.transaction = transaction
        self.is_external_connection = True
        self.is_external_transaction = True
        self.state = TransactionState.STARTED

    # ------------------------------------------------------------------
    # Commit / rollback
    # ------------------------------------------------------------------

    async def finish_commit(self) -> None:
        self.state = TransactionState.COMMITTING
        if not self.is_external_transaction and self.transaction is not None:
            await self.transaction.commit()
        await self._close()
        self.state = TransactionState.COMMITTED

    def enter_rollback(self, event: str) -> bool:
        """Move to ``ROLLING_BACK`` unless already terminal; return whether it did."""
        if self.state.is_terminal:
            return False
        logger.warning(event, source=self.source, state=self.state.value)
        self.state = TransactionState.ROLLING_BACK
        return True

    async def release(self) -> None:
        """Roll back and close whatever this transaction owns."""
        if (
            self.transaction is not None
            and not self.is_external_transaction
            and self.transaction.is_active
        ):
            await self.transaction.rollback()
        await self._close()

    def complete_rollback(self) -> None:
        if self.state is TransactionState.ROLLING_BACK:
            self.state = TransactionState.ROLLED_BACK

    async def _close(self) -> None:
        if (
            self.connection is not None
            and not self.is_external_connection
            and not self.connection.closed
        ):
            await self.connection.close()

    # ------------------------------------------------------------------
    # Autonomous writes
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def autonomous(self) -> AsyncIterator[AsyncConnection]:
        """A separate connection whose work commits on exit, independent of the primary transaction."""
        if self._engine is None:
            raise StoreError("No engine is available for autonomous writes.")
        async with self._engine.begin() as conn:
            yield conn

    @contextlib.asynccontextmanager
    async def bookkeeping(self) -> AsyncIterator[AsyncConnection | None]:
        """Connection for lease and failure bookkeeping.

        Attached to an external transaction, bookkeeping joins it and the
        external owner decides whether it persists; ``None`` is yielded once
        that transaction has ended. Otherwise this is :meth:`autonomous`.
        """
        if self.is_external_transaction:
            if self.transaction is not None and self.transaction.is_active:
                yield self.connection
            else:
                yield None
            return
        async with self.autonomous() as conn:
            yield conn

    async def insert_failure(
        self,
        conn: AsyncConnection,
        error: BaseException,
        serialized: SerializedEvent | None = None,
    ) -> None:
        await conn.execute(
            insert(self.schema.failures).values(
                source=self.source,
                timestamp=self.now(),
                event_type=serialized.type if serialized is not None else None,
                event_data=serialized.data if serialized is not None else None,
                exception=exception_detail(error),
            )
        )


async def attach_to(inner: Any, outer: Transactional) -> None:
    """Begin *inner* on the native transaction of the already started *outer*.

    Both run in the same store transaction afterwards; *outer* keeps
    ownership and decides whether it commits. *outer* may already have
    written: an attached inbox queue leases and records failures through the
    shared transaction, so they persist only if *outer* commits.
    """
    if inner is None or outer is None:
        raise ValueError("inner and outer must not be None")
    ensure_startable(inner)
    ensure_started(outer)
    handles = outer.native
    if handles is None or handles.transaction is None:
        raise IllegalStateError(
            f"{type(outer).__name__} does not expose a native transaction",
            state=outer.state,
        )
    await inner.begin_with_transaction(handles.transaction)


__all__ = ["SqlTransactionCore", "attach_to", "exception_detail"]
