"""Application inbox – dispatching leased inbox events to local handlers."""
from mp_relay.application.inbox.dispatcher import EventHandler, HandlerDispatcher
from mp_relay.application.inbox.processor import InboxProcessor, QueueFactory

__all__ = ["EventHandler", "HandlerDispatcher", "InboxProcessor", "QueueFactory"]
