"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError     (application.py)
    │   ├── IllegalStateError
    │   └── UnhandledEventError
    └── InfrastructureError  (infrastructure.py)
        ├── SerializationError
        └── StoreError
"""

from mp_relay.kernel.errors.application import (
    ApplicationError,
    IllegalStateError,
    UnhandledEventError,
)
from mp_relay.kernel.errors.base import BaseError
from mp_relay.kernel.errors.infrastructure import (
    InfrastructureError,
    SerializationError,
    StoreError,
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
