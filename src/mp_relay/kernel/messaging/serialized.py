"""Kernel messaging – SerializedEvent envelope."""
from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class SerializedEvent:
    """Persisted form of an event: a type discriminator and its payload.

    Only used for persistence and diagnostics, never for processing.
    ``data`` may contain sensitive information, so ``repr`` leaves it out.
    """

    type: str
    data: str = dataclasses.field(repr=False)

    def __str__(self) -> str:
        return f"SerializedEvent(type={self.type!r}, data=<{len(self.data)} chars>)"


__all__ = ["SerializedEvent"]
