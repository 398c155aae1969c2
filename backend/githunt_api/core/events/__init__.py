"""Pub/sub adapters used to deliver subscription events."""

from .bus import EventStream, InMemoryPubSub, Predicate, PubSub, RedisPubSub, create_pubsub

__all__ = [
    "EventStream",
    "InMemoryPubSub",
    "Predicate",
    "PubSub",
    "RedisPubSub",
    "create_pubsub",
]
