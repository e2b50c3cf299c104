"""DDD building blocks – public re-export surface."""

from mp_relay.kernel.ddd.aggregate import AggregateRoot
from mp_relay.kernel.ddd.domain_event import DomainEvent, Event, IntegrationEvent
from mp_relay.kernel.ddd.repository import Repository
from mp_relay.kernel.ddd.unit_of_work import EventPublisher, UnitOfWork

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "Event",
    "EventPublisher",
    "IntegrationEvent",
    "Repository",
    "UnitOfWork",
]
