"""SQLAlchemy adapter – engine registry and ORM session binding."""
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from mp_relay.kernel.errors import IllegalStateError
from mp_relay.kernel.transactions import Transactional, ensure_started

_engines: dict[str, AsyncEngine] = {}


def engine_for(connection_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Return the process-wide engine for *connection_url*, creating it on first use.

    Transactions built from a connection URL share the engine's pool instead
    of creating one per instance.
    """
    engine = _engines.get(connection_url)
    if engine is None:
        engine = create_async_engine(connection_url, **engine_kwargs)
        _engines[connection_url] = engine
    return engine


async def dispose_engines() -> None:
    """Dispose every engine created by :func:`engine_for`."""
    engines = list(_engines.values())
    _engines.clear()
    for engine in engines:
        await engine.dispose()


def bind_session(transaction: Transactional, **session_kwargs: Any) -> AsyncSession:
    """Return an ORM session that runs inside *transaction*.

    The session joins the transaction's connection: flushing writes into the
    relay transaction and committing the session never commits the relay
    transaction itself. Close the session before the transaction ends.
    """
    ensure_started(transaction)
    handles = transaction.native
    if handles is None:
        raise IllegalStateError(
            f"{type(transaction).__name__} does not expose a native connection",
            state=transaction.state,
        )
    session_kwargs.setdefault("expire_on_commit", False)
    return AsyncSession(bind=handles.connection, **session_kwargs)


__all__ = ["bind_session", "dispose_engines", "engine_for"]
