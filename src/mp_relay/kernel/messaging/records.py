"""Kernel messaging – persisted outbox/inbox and failure records."""
from __future__ import annotations

import dataclasses
from datetime import datetime

from mp_relay.kernel.messaging.serialized import SerializedEvent


@dataclasses.dataclass(frozen=True)
class RelayRecord:
    """A row of the outbox or inbox table.

    ``id`` is assigned by the store, is never reused and is the only
    ordering signal. ``taken`` is the lease marker: ``None`` means the row
    is eligible for dequeue.
    """

    id: int
    source: str
    timestamp: datetime
    type: str
    data: str = dataclasses.field(repr=False)
    taken: datetime | None = None

    @property
    def serialized(self) -> SerializedEvent:
        return SerializedEvent(self.type, self.data)


@dataclasses.dataclass(frozen=True)
class FailureRecord:
    """Append-only record of a failed unit of work or inbox processing."""

    source: str
    timestamp: datetime
    event_type: str | None = None
    event_data: str | None = dataclasses.field(default=None, repr=False)
    exception: str | None = None


__all__ = ["FailureRecord", "RelayRecord"]
