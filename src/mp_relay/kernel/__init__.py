"""Kernel – framework-agnostic building blocks of the relay."""

from mp_relay.kernel.errors import (
    ApplicationError,
    BaseError,
    IllegalStateError,
    InfrastructureError,
    SerializationError,
    StoreError,
    UnhandledEventError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "IllegalStateError",
    "InfrastructureError",
    "SerializationError",
    "StoreError",
    "UnhandledEventError",
]
