"""Application-layer errors – usage errors raised at the relay's public surface."""

from __future__ import annotations

from typing import Any

from mp_relay.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class IllegalStateError(ApplicationError):
    """An operation was invoked in a transaction state that does not permit it.

    This is a programmer error: it is surfaced immediately and never retried.
    """

    default_code = "illegal_state"

    def __init__(
        self,
        message: str,
        *,
        state: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.state = state
        if state is not None:
            self.detail.setdefault("state", str(state))


class UnhandledEventError(ApplicationError):
    """No handler is registered for a dispatched event type."""

    default_code = "unhandled_event"

    def __init__(self, event_type: str, **kwargs: Any) -> None:
        super().__init__(f"No handler registered for event '{event_type}'", **kwargs)
        self.event_type = event_type


__all__ = [
    "ApplicationError",
    "IllegalStateError",
    "UnhandledEventError",
]
