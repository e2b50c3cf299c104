"""Application inbox – InboxProcessor.

Drives an :class:`~mp_relay.kernel.messaging.InboxQueue`: one queue instance
per lease cycle, each cycle committing, failing or rolling back exactly one
event.
"""
from __future__ import annotations

import asyncio
from typing import Callable

from mp_relay.kernel.messaging import InboxDispatcher, InboxQueue
from mp_relay.kernel.transactions import enter_scope, exit_scope
from mp_relay.observability.logging import get_logger

logger = get_logger(__name__)

QueueFactory = Callable[[], InboxQueue]


class InboxProcessor:
    """Leases inbox events one at a time and hands them to a dispatcher.

    A handler error fails the queue: the event is moved to the failure table
    and the processor carries on with the next one. Errors raised while
    leasing (store or deserialization errors) propagate out of
    :meth:`process_next` after the queue has been failed.
    """

    def __init__(self, queue_factory: QueueFactory, dispatcher: InboxDispatcher) -> None:
        self._queue_factory = queue_factory
        self._dispatcher = dispatcher

    async def process_next(self) -> bool:
        """Run one lease cycle; return whether an event was leased."""
        queue = await enter_scope(self._queue_factory())
        event = queue.current_event
        if event is None:
            await exit_scope(queue, None)
            return False

        try:
            await self._dispatcher.dispatch(event)
        except Exception as exc:
            await exit_scope(queue, exc)
        except BaseException as exc:
            await exit_scope(queue, exc)
            raise
        else:
            await exit_scope(queue, None)
            logger.info("inbox.event_processed", event_type=event.event_type)
        return True

    async def run(self, stop_event: asyncio.Event, idle_delay: float = 1.0) -> None:
        """Process events until *stop_event* is set.

        Sleeps *idle_delay* seconds whenever the inbox is empty or a lease
        cycle raised; the sleep ends early when *stop_event* is set.
        """
        logger.info("inbox.processor_started", idle_delay=idle_delay)
        while not stop_event.is_set():
            try:
                leased = await self.process_next()
            except Exception:
                logger.exception("inbox.processor_cycle_failed")
                leased = False
            if not leased:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=idle_delay)
                except TimeoutError:
                    pass
        logger.info("inbox.processor_stopped")


__all__ = ["InboxProcessor", "QueueFactory"]
