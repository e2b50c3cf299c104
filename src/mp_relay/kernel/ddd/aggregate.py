"""AggregateRoot – collects the events raised by state changes."""

from __future__ import annotations

from mp_relay.kernel.ddd.domain_event import Event


class AggregateRoot:
    """Mixin for aggregate roots that raise events.

    Works on plain classes and on SQLAlchemy mapped classes alike: the
    pending-event list is created lazily because the ORM does not call
    ``__init__`` when it loads an instance.
    """

    def _pending(self) -> list[Event]:
        events = self.__dict__.get("_pending_events")
        if events is None:
            events = []
            self.__dict__["_pending_events"] = events
        return events

    def _raise_event(self, event: Event) -> None:
        """Record an event to be published when the aggregate is saved."""
        self._pending().append(event)

    def pull_events(self) -> list[Event]:
        """Return and clear pending events."""
        pending = self._pending()
        events = list(pending)
        pending.clear()
        return events

    @property
    def pending_events(self) -> tuple[Event, ...]:
        return tuple(self._pending())


__all__ = ["AggregateRoot"]
