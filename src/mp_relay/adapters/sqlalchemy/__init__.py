"""SQLAlchemy adapter – unit of work, inbox queue, relay tables, repositories."""
from mp_relay.adapters.sqlalchemy.inbox import SqlAlchemyInboxQueue, lease_statement
from mp_relay.adapters.sqlalchemy.options import (
    SqlAlchemyInboxQueueOptions,
    SqlAlchemyRelayOptions,
    SqlAlchemyUnitOfWorkOptions,
)
from mp_relay.adapters.sqlalchemy.repository import SqlAlchemyRepositoryBase
from mp_relay.adapters.sqlalchemy.schema import RelaySchema
from mp_relay.adapters.sqlalchemy.session import bind_session, dispose_engines, engine_for
from mp_relay.adapters.sqlalchemy.transaction import attach_to
from mp_relay.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork

__all__ = [
    "RelaySchema",
    "SqlAlchemyInboxQueue",
    "SqlAlchemyInboxQueueOptions",
    "SqlAlchemyRelayOptions",
    "SqlAlchemyRepositoryBase",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUnitOfWorkOptions",
    "attach_to",
    "bind_session",
    "dispose_engines",
    "engine_for",
    "lease_statement",
]
