"""Application – relay use-case building blocks (store-agnostic)."""

from mp_relay.application.inbox import EventHandler, HandlerDispatcher, InboxProcessor

__all__ = ["EventHandler", "HandlerDispatcher", "InboxProcessor"]
