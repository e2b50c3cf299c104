"""Events produced by aggregates and relayed through the inbox/outbox."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from uuid import uuid4


@dataclasses.dataclass(frozen=True, kw_only=True)
class Event:
    """Base class for every relayed event.

    Do not subclass directly; use :class:`DomainEvent` or
    :class:`IntegrationEvent` so the unit of work can route the event.
    """

    event_id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(UTC)
    )

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclasses.dataclass(frozen=True, kw_only=True)
class DomainEvent(Event):
    """Intra-node event, delivered to local handlers via the inbox.

    Example::

        @dataclasses.dataclass(frozen=True, kw_only=True)
        class OrderPlaced(DomainEvent):
            order_id: str
            total_cents: int
    """


@dataclasses.dataclass(frozen=True, kw_only=True)
class IntegrationEvent(Event):
    """Inter-node event, handed to external consumers via the outbox."""


__all__ = ["DomainEvent", "Event", "IntegrationEvent"]
