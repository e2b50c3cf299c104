"""Transaction state machine shared by every stateful relay resource."""
from __future__ import annotations

from enum import Enum
from typing import Protocol

from mp_relay.kernel.errors import IllegalStateError


class TransactionState(str, Enum):
    """Lifecycle of a unit of work or inbox queue transaction.

    ``NOT_STARTED → STARTING → STARTED → {COMMITTING → COMMITTED | ROLLING_BACK → ROLLED_BACK}``

    Failing a transaction is not a state of its own: it performs store-side
    bookkeeping and then moves through ``ROLLING_BACK`` to ``ROLLED_BACK``.
    """

    NOT_STARTED = "NOT_STARTED"
    STARTING = "STARTING"
    STARTED = "STARTED"
    COMMITTING = "COMMITTING"
    COMMITTED = "COMMITTED"
    ROLLING_BACK = "ROLLING_BACK"
    ROLLED_BACK = "ROLLED_BACK"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionState.COMMITTED, TransactionState.ROLLED_BACK)


class HasTransactionState(Protocol):
    @property
    def state(self) -> TransactionState: ...


def ensure_started(transaction: HasTransactionState) -> None:
    """Raise :class:`IllegalStateError` unless *transaction* is ``STARTED``."""
    if transaction is None:
        raise ValueError("transaction must not be None")
    if transaction.state is not TransactionState.STARTED:
        raise IllegalStateError(
            f"Transaction not started or was already committed or rolled back ({transaction.state.value}).",
            state=transaction.state,
        )


def ensure_startable(transaction: HasTransactionState) -> None:
    """Raise :class:`IllegalStateError` unless *transaction* is ``NOT_STARTED``."""
    if transaction is None:
        raise ValueError("transaction must not be None")
    if transaction.state is not TransactionState.NOT_STARTED:
        raise IllegalStateError(
            f"Transaction already started, committed, or rolled back ({transaction.state.value}).",
            state=transaction.state,
        )


__all__ = ["HasTransactionState", "TransactionState", "ensure_startable", "ensure_started"]
