"""SQLAlchemy adapter – options for the unit of work and the inbox queue."""
from __future__ import annotations

import dataclasses
from datetime import timedelta

from mp_relay.config.settings import Settings
from mp_relay.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class SqlAlchemyRelayOptions(Settings):
    """Store location shared by the unit of work and the inbox queue.

    ``connection_url`` is an async SQLAlchemy URL (``postgresql+asyncpg://…``,
    ``mssql+aioodbc://…``, ``sqlite+aiosqlite:///…``). Leave it ``None`` when
    an engine, connection or transaction is supplied by the caller.
    ``schema_name`` is ``None`` for the database default; SQL Server
    deployments typically use ``"dbo"``.
    """

    connection_url: str | None = None
    schema_name: str | None = None
    inbox_table_name: str = "Inbox"
    outbox_table_name: str = "Outbox"
    failure_table_name: str = "Failures"

    def _validate(self) -> None:
        for name in ("inbox_table_name", "outbox_table_name", "failure_table_name"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise InvalidSettingValueError(
                    name, value, "must not be empty", owner=type(self).__name__
                )


@dataclasses.dataclass
class SqlAlchemyUnitOfWorkOptions(SqlAlchemyRelayOptions):
    """Options for :class:`~mp_relay.adapters.sqlalchemy.uow.SqlAlchemyUnitOfWork`."""

    _prefix = "RELAY_UOW"


@dataclasses.dataclass
class SqlAlchemyInboxQueueOptions(SqlAlchemyRelayOptions):
    """Options for :class:`~mp_relay.adapters.sqlalchemy.inbox.SqlAlchemyInboxQueue`.

    ``non_graceful_retry_delay`` is how long a lease is honoured. Several
    workers may share one inbox table; a worker that dies mid-processing
    cannot release its lease, so once the delay has passed the event becomes
    eligible again. If the delay is shorter than the slowest legitimate
    handler run, the same event will be processed twice concurrently, and
    events re-leased this way are no longer processed in order.
    """

    _prefix = "RELAY_INBOX"

    non_graceful_retry_delay: timedelta = timedelta(minutes=10)

    def _validate(self) -> None:
        super()._validate()
        validate_retry_delay(self.non_graceful_retry_delay)


def validate_retry_delay(delay: timedelta) -> None:
    if not isinstance(delay, timedelta) or delay <= timedelta(0):
        raise InvalidSettingValueError(
            "non_graceful_retry_delay",
            delay,
            "must be a positive duration",
            owner=SqlAlchemyInboxQueueOptions.__name__,
        )


__all__ = [
    "SqlAlchemyInboxQueueOptions",
    "SqlAlchemyRelayOptions",
    "SqlAlchemyUnitOfWorkOptions",
    "validate_retry_delay",
]
