"""Kernel messaging – delivery guarantee taxonomy for inbox queues.

The same scale describes two independent properties of a queue:

* :class:`DuplicateAvoidance` – whether an event can be handed out twice.
* :class:`OrderPreservation` – whether events *start* processing in the
  order they were stored. Completion order is never guaranteed: several
  leased events may always be processed concurrently.
"""
from __future__ import annotations

from enum import IntEnum


class DuplicateAvoidance(IntEnum):
    NONE = 0
    """No guarantee; the same event may be processed repeatedly."""

    BEST_EFFORT = 1
    """The queue tries not to deliver an event twice, without guarantee."""

    ALWAYS_EXCEPT_CRASH = 2
    """Holds unless the process terminates ungracefully; afterwards any
    previously delivered event may be delivered again."""

    ALWAYS_EXCEPT_RESTART = 3
    """Holds except for events that were in flight when the process
    terminated ungracefully."""

    INHERENT = 4
    """Structurally guaranteed."""


class OrderPreservation(IntEnum):
    NONE = 0
    BEST_EFFORT = 1
    ALWAYS_EXCEPT_CRASH = 2
    ALWAYS_EXCEPT_RESTART = 3
    INHERENT = 4


__all__ = ["DuplicateAvoidance", "OrderPreservation"]
