"""SQLAlchemy adapter – SqlAlchemyInboxQueue.

Leasing
-------
``begin`` leases the oldest eligible inbox row with a single statement::

    UPDATE inbox SET taken = :now
    WHERE id = (SELECT id FROM inbox
                WHERE taken IS NULL OR taken <= :cutoff
                ORDER BY id LIMIT 1 FOR UPDATE SKIP LOCKED)
      AND (taken IS NULL OR taken <= :cutoff)
    RETURNING id, type, data

with ``cutoff = now - non_graceful_retry_delay``. Selection and marking
happen in one statement and the outer ``WHERE`` re-checks eligibility, so two
workers can never both lease the same unleased row. The statement commits on
an autonomous connection: the lease is visible to other workers at once and
outlives a crash of this worker, after which it expires and the row is
leased again. ``FOR UPDATE SKIP LOCKED`` is only rendered by dialects that
support it.

Finalising
----------
* ``commit`` deletes the row inside the primary transaction, together with
  whatever the handler wrote.
* ``rollback`` clears ``taken`` so the row is eligible immediately.
* ``fail`` records a failure row and deletes the leased row in one
  autonomous transaction, then rolls back.

Begun on a caller's transaction (``begin_with_transaction``/``attach_to``),
the lease and the finalising writes all go through that transaction: the
caller may already hold write locks, and its commit decides the outcome. A
worker crash then rolls the lease back with everything else, so the row is
eligible again immediately.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Table, Update, delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

from mp_relay.adapters.sqlalchemy.options import SqlAlchemyInboxQueueOptions, validate_retry_delay
from mp_relay.adapters.sqlalchemy.schema import RelaySchema
from mp_relay.adapters.sqlalchemy.transaction import SqlTransactionCore
from mp_relay.kernel.ddd import Event
from mp_relay.kernel.messaging import (
    DuplicateAvoidance,
    EventSerializer,
    InboxQueue,
    OrderPreservation,
    SerializedEvent,
)
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


def lease_statement(inbox: Table, now: datetime, cutoff: datetime) -> Update:
    """Build the atomic select-and-mark statement for the next eligible row."""
    # The inner select must not correlate to the row being updated.
    pending = inbox.alias("pending")
    candidate = (
        select(pending.c.id)
        .where(or_(pending.c.taken.is_(None), pending.c.taken <= cutoff))
        .order_by(pending.c.id.asc())
        .limit(1)
        .with_for_update(skip_locked=True)
        .scalar_subquery()
    )
    return (
        update(inbox)
        .where(inbox.c.id == candidate)
        .where(or_(inbox.c.taken.is_(None), inbox.c.taken <= cutoff))
        .values(taken=now)
        .returning(inbox.c.id, inbox.c.type, inbox.c.data)
    )


class SqlAlchemyInboxQueue(InboxQueue):
    """Inbox queue leasing one event per transaction from a SQL inbox table.

    Duplicate avoidance and order preservation both hold except for events
    that were in flight when a worker terminated ungracefully
    (:attr:`DuplicateAvoidance.ALWAYS_EXCEPT_RESTART`).
    """

    def __init__(
        self,
        options: SqlAlchemyInboxQueueOptions,
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
        self._current_id: int | None = None
        self._current_event: Event | None = None
        self._current_serialized: SerializedEvent | None = None

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
    def order_preservation(self) -> OrderPreservation:
        return OrderPreservation.ALWAYS_EXCEPT_RESTART

    @property
    def duplicate_avoidance(self) -> DuplicateAvoidance:
        return DuplicateAvoidance.ALWAYS_EXCEPT_RESTART

    @property
    def current_event(self) -> Event | None:
        return self._current_event

    @property
    def current_event_serialized(self) -> SerializedEvent | None:
        return self._current_serialized

    @property
    def current_event_id(self) -> int | None:
        """Store id of the leased row, or ``None``."""
        return self._current_id

    # ------------------------------------------------------------------
    # Begin
    # ------------------------------------------------------------------

    async def begin(self) -> None:
        validate_retry_delay(self._options.non_graceful_retry_delay)
        await self._core.start_owned()
        await self._fetch_next_event()

    async def begin_with_connection(self, connection: AsyncConnection) -> None:
        validate_retry_delay(self._options.non_graceful_retry_delay)
        await self._core.start_with_connection(connection)
        await self._fetch_next_event()

    async def begin_with_transaction(self, transaction: AsyncTransaction) -> None:
        validate_retry_delay(self._options.non_graceful_retry_delay)
        await self._core.start_with_transaction(transaction)
        await self._fetch_next_event()

    async def _fetch_next_event(self) -> None:
        self._clear_current_event()

        now = self._core.now()
        cutoff = now - self._options.non_graceful_retry_delay
        row = None
        async with self._core.bookkeeping() as conn:
            if conn is not None:
                result = await conn.execute(lease_statement(self._schema.inbox, now, cutoff))
                row = result.first()

        if row is None:
            logger.debug("inbox.queue_empty", source=self._core.source)
            return

        # Keep the lease even if decoding fails, so fail() can resolve the row.
        self._current_id = row.id
        self._current_serialized = SerializedEvent(row.type, row.data)
        logger.debug("inbox.lease_acquired", id=row.id, event_type=row.type)
        self._current_event = await self._serializer.deserialize(self._current_serialized)

    def _clear_current_event(self) -> int | None:
        current_id = self._current_id
        self._current_id = None
        self._current_event = None
        self._current_serialized = None
        return current_id

    # ------------------------------------------------------------------
    # Commit / rollback / fail
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        ensure_started(self)
        current_id = self._current_id
        if current_id is not None:
            await self._core.require_connection().execute(
                delete(self._schema.inbox).where(self._schema.inbox.c.id == current_id)
            )
        await self._core.finish_commit()
        self._clear_current_event()
        if current_id is not None:
            logger.debug("inbox.event_completed", id=current_id)

    async def rollback(self) -> None:
        current_id = self._clear_current_event()
        self._core.enter_rollback("inbox.rolling_back")
        try:
            await self._core.release()
        finally:
            try:
                if current_id is not None:
                    await self._release_lease(current_id)
            finally:
                self._core.complete_rollback()

    async def fail(self, error: BaseException | None) -> None:
        if error is None:
            await self.rollback()
            return

        logger.error("inbox.transaction_failed", source=self._core.source, exc_info=error)
        serialized = self._current_serialized
        current_id = self._clear_current_event()
        record = self._core.in_flight
        self._core.enter_rollback("inbox.rolling_back")
        try:
            await self._core.release()
        finally:
            try:
                if record:
                    await self._record_failure(error, current_id, serialized)
            finally:
                self._core.complete_rollback()

    async def _release_lease(self, current_id: int) -> None:
        inbox = self._schema.inbox
        async with self._core.bookkeeping() as conn:
            if conn is None:
                return
            await conn.execute(update(inbox).where(inbox.c.id == current_id).values(taken=None))
        logger.debug("inbox.lease_released", id=current_id)

    async def _record_failure(
        self,
        error: BaseException,
        current_id: int | None,
        serialized: SerializedEvent | None,
    ) -> None:
        inbox = self._schema.inbox
        try:
            async with self._core.bookkeeping() as conn:
                if conn is None:
                    return
                await self._core.insert_failure(conn, error, serialized)
                if current_id is not None:
                    await conn.execute(delete(inbox).where(inbox.c.id == current_id))
        except SQLAlchemyError:
            logger.exception(
                "inbox.failure_record_failed", source=self._core.source, id=current_id
            )

    # ------------------------------------------------------------------
    # Scoped use
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "SqlAlchemyInboxQueue":
        return await enter_scope(self)

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await exit_scope(self, exc_val)


__all__ = ["SqlAlchemyInboxQueue", "lease_statement"]
