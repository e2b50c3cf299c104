"""
mp_relay – transactional outbox/inbox relay.

Import path convention::

    from mp_relay.kernel.ddd import DomainEvent, IntegrationEvent, UnitOfWork
    from mp_relay.kernel.messaging import InboxQueue, SerializedEvent
    from mp_relay.adapters.sqlalchemy import SqlAlchemyInboxQueue, SqlAlchemyUnitOfWork
    from mp_relay.application.inbox import InboxProcessor
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
