"""Transactional port and the native-handle accessor."""
from __future__ import annotations

import dataclasses
from typing import Any, Protocol, runtime_checkable

from mp_relay.kernel.transactions.state import TransactionState


@dataclasses.dataclass(frozen=True)
class NativeHandles:
    """Store-level handles a transaction runs on.

    ``connection`` and ``transaction`` are driver objects (SQLAlchemy
    ``AsyncConnection`` / ``AsyncTransaction`` for the SQL adapters). The
    ``is_external_*`` flags record who owns them: a transaction never closes
    or ends a handle it did not open.
    """

    connection: Any
    transaction: Any | None
    is_external_connection: bool = False
    is_external_transaction: bool = False


@runtime_checkable
class Transactional(Protocol):
    """Port: a resource driven by the :class:`TransactionState` machine.

    ``native`` is ``None`` when the implementation has no store handle to
    expose (in-memory fakes, or before ``begin``).
    """

    @property
    def state(self) -> TransactionState: ...

    @property
    def native(self) -> NativeHandles | None: ...

    async def begin(self) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def fail(self, error: BaseException | None) -> None: ...


__all__ = ["NativeHandles", "Transactional"]
