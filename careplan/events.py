"""
Outbound domain events.

Each successful command publishes one DomainEvent after its transaction
commits. Nothing in the core reads events back, and a failed delivery never
fails the command.
"""

import json
import logging
from dataclasses import dataclass, field

import redis
from django.conf import settings
from kombu.exceptions import OperationalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    name: str
    payload: dict = field(default_factory=dict)

    def to_json(self):
        return json.dumps({'event': self.name, 'payload': self.payload})


def get_redis_client():
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=0,
    )


def push_to_queue(name, payload, client=None):
    """RPUSH one event onto the configured queue. Raises redis.RedisError."""
    client = client or get_redis_client()
    client.rpush(settings.CAREPLAN_EVENT_QUEUE, DomainEvent(name, payload).to_json())


class InMemoryEventSink:

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def names(self):
        return [e.name for e in self.events]

    def clear(self):
        self.events.clear()


class RedisEventSink:

    def __init__(self, client=None):
        self.client = client or get_redis_client()

    def publish(self, event):
        try:
            push_to_queue(event.name, event.payload, client=self.client)
        except redis.RedisError:
            logger.exception(f"Failed to push event {event.name} to Redis")


class CeleryEventSink:
    """Hands delivery to a Celery task, which retries against Redis."""

    def publish(self, event):
        from .tasks import deliver_domain_event
        try:
            deliver_domain_event.delay(event.name, event.payload)
        except OperationalError:
            logger.exception(f"Failed to enqueue event {event.name}")


_SINKS = {
    'memory': InMemoryEventSink,
    'redis': RedisEventSink,
    'celery': CeleryEventSink,
}


def get_event_sink(kind=None):
    kind = kind or settings.CAREPLAN_EVENT_SINK
    try:
        return _SINKS[kind]()
    except KeyError:
        raise ValueError(f"Unknown CAREPLAN_EVENT_SINK '{kind}', expected one of {sorted(_SINKS)}")
