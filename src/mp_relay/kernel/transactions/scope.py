"""Scoped acquisition for transactional resources.

Every concrete transaction routes ``async with`` through :func:`enter_scope`
and :func:`exit_scope`, so the machine reaches a terminal state on every exit
path, including exceptions and task cancellation.
"""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, TypeVar

from mp_relay.kernel.transactions.ports import Transactional
from mp_relay.kernel.transactions.state import TransactionState, ensure_startable

T = TypeVar("T", bound=Transactional)


async def enter_scope(transaction: T) -> T:
    """Begin *transaction*; if beginning fails, finalise it before re-raising."""
    ensure_startable(transaction)
    try:
        await transaction.begin()
    except Exception as exc:
        await exit_scope(transaction, exc)
        raise
    except BaseException:
        await transaction.rollback()
        raise
    return transaction


async def exit_scope(transaction: Transactional, error: BaseException | None) -> None:
    """Commit on clean exit, fail on error, roll back whatever is left open."""
    try:
        if error is None:
            if transaction.state is TransactionState.STARTED:
                await transaction.commit()
        elif isinstance(error, Exception):
            await transaction.fail(error)
    finally:
        if not transaction.state.is_terminal:
            await transaction.rollback()


@contextlib.asynccontextmanager
async def transaction_scope(transaction: T) -> AsyncIterator[T]:
    """Run a block inside *transaction*.

    Example::

        async with transaction_scope(SqlAlchemyInboxQueue(options, serializer)) as queue:
            if queue.current_event is not None:
                await dispatcher.dispatch(queue.current_event)
    """
    await enter_scope(transaction)
    try:
        yield transaction
    except BaseException as exc:
        await exit_scope(transaction, exc)
        raise
    await exit_scope(transaction, None)


__all__ = ["enter_scope", "exit_scope", "transaction_scope"]
