"""Kernel transactions – state machine, port, scoped acquisition."""
from mp_relay.kernel.transactions.ports import NativeHandles, Transactional
from mp_relay.kernel.transactions.scope import enter_scope, exit_scope, transaction_scope
from mp_relay.kernel.transactions.state import (
    TransactionState,
    ensure_startable,
    ensure_started,
)

__all__ = [
    "NativeHandles",
    "TransactionState",
    "Transactional",
    "ensure_startable",
    "ensure_started",
    "enter_scope",
    "exit_scope",
    "transaction_scope",
]
