"""Infrastructure errors – I/O failures and payload codec failures."""

from __future__ import annotations

from typing import Any

from mp_relay.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize an event payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class StoreError(InfrastructureError):
    """The backing store is not usable for the requested operation.

    Driver-level failures (connectivity, deadlocks) are not wrapped: they
    propagate as the driver's own exceptions.
    """

    default_code = "store_error"


__all__ = [
    "InfrastructureError",
    "SerializationError",
    "StoreError",
]
