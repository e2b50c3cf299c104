"""SQLAlchemy adapter – inbox, outbox and failure tables."""
from __future__ import annotations

import functools
from typing import Any

from sqlalchemy import BigInteger, Column, DateTime, Integer, MetaData, Table, Text, select
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from mp_relay.adapters.sqlalchemy.options import SqlAlchemyRelayOptions
from mp_relay.kernel.messaging import FailureRecord, RelayRecord

# SQLite only auto-increments INTEGER PRIMARY KEY columns.
_IdType = BigInteger().with_variant(Integer(), "sqlite")


def _event_table(name: str, metadata: MetaData, schema: str | None) -> Table:
    return Table(
        name,
        metadata,
        Column("id", _IdType, primary_key=True, autoincrement=True),
        Column("source", Text, nullable=False),
        Column("timestamp", DateTime(), nullable=False),
        Column("type", Text, nullable=False),
        Column("data", Text, nullable=False),
        Column("taken", DateTime(), nullable=True),
        schema=schema,
    )


class RelaySchema:
    """The three relay tables for one schema/table-name configuration."""

    def __init__(
        self,
        *,
        schema_name: str | None = None,
        inbox_table_name: str = "Inbox",
        outbox_table_name: str = "Outbox",
        failure_table_name: str = "Failures",
    ) -> None:
        self.metadata = MetaData()
        self.inbox = _event_table(inbox_table_name, self.metadata, schema_name)
        self.outbox = _event_table(outbox_table_name, self.metadata, schema_name)
        self.failures = Table(
            failure_table_name,
            self.metadata,
            Column("source", Text, nullable=False),
            Column("timestamp", DateTime(), nullable=False),
            Column("eventType", Text, nullable=True, key="event_type"),
            Column("eventData", Text, nullable=True, key="event_data"),
            Column("exception", Text, nullable=True),
            schema=schema_name,
        )

    @classmethod
    def for_options(cls, options: SqlAlchemyRelayOptions) -> "RelaySchema":
        return _cached_schema(
            options.schema_name,
            options.inbox_table_name,
            options.outbox_table_name,
            options.failure_table_name,
        )

    async def create_all(self, bind: AsyncEngine | AsyncConnection) -> None:
        """Create the tables that do not exist yet."""
        if isinstance(bind, AsyncEngine):
            async with bind.begin() as conn:
                await conn.run_sync(self.metadata.create_all)
        else:
            await bind.run_sync(self.metadata.create_all)

    async def read_inbox(self, conn: AsyncConnection) -> list[RelayRecord]:
        return await self._read_events(conn, self.inbox)

    async def read_outbox(self, conn: AsyncConnection) -> list[RelayRecord]:
        return await self._read_events(conn, self.outbox)

    async def read_failures(self, conn: AsyncConnection) -> list[FailureRecord]:
        c = self.failures.c
        result = await conn.execute(select(self.failures))
        return [
            FailureRecord(
                source=row._mapping[c.source],
                timestamp=row._mapping[c.timestamp],
                event_type=row._mapping[c.event_type],
                event_data=row._mapping[c.event_data],
                exception=row._mapping[c.exception],
            )
            for row in result
        ]

    async def _read_events(self, conn: AsyncConnection, table: Table) -> list[RelayRecord]:
        result = await conn.execute(select(table).order_by(table.c.id))
        return [RelayRecord(**row._mapping) for row in result]


@functools.lru_cache(maxsize=32)
def _cached_schema(schema_name: Any, inbox: str, outbox: str, failures: str) -> RelaySchema:
    return RelaySchema(
        schema_name=schema_name,
        inbox_table_name=inbox,
        outbox_table_name=outbox,
        failure_table_name=failures,
    )


__all__ = ["RelaySchema"]
