"""
Pub/sub adapters for GraphQL subscriptions.

A mutation publishes a payload on a named topic; every subscription opened
on that topic receives the payload if its own predicate accepts it.

Two implementations share the :class:`PubSub` contract:

- InMemoryPubSub: bounded asyncio queues, single process
- RedisPubSub: Redis channels, one connection per process plus one
  pub/sub connection per open subscription

Usage Examples:
    bus = create_pubsub(EventBusConfig(mode=EventBusMode.MEMORY))
    await bus.start()

    stream = await bus.subscribe(
        "commentAdded", lambda comment: comment["repository_name"] == "a/b"
    )
    await bus.publish("commentAdded", comment)
    event = await stream.__anext__()
    await stream.aclose()

    await bus.stop()

Publishing is fire-once: a failed publish raises EventBusError and is not
retried.
"""

import asyncio
import contextlib
import json
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from githunt_api.core.config import EventBusConfig
from githunt_api.core.enums import EventBusMode
from githunt_api.core.errors import EventBusError
from githunt_api.core.logging import get_logger

logger = get_logger(__name__)

Predicate = Callable[[Any], bool]

# Returned by a receive call that produced no deliverable payload.
_WAKEUP = object()


class EventStream:
    """
    Async iterator over the payloads of one subscription.

    The stream is registered with its bus before ``subscribe`` returns, so
    nothing published afterwards is missed. Iteration stops once the stream
    is closed, either by the subscriber or by the bus shutting down.
    """

    def __init__(
        self,
        topic: str,
        receive: Callable[[], Awaitable[Any]],
        predicate: Predicate | None,
        on_close: Callable[[], Awaitable[None]],
    ):
        self.topic = topic
        self._receive = receive
        self._predicate = predicate
        self._on_close = on_close
        self._close_callbacks: list[Callable[[], None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "EventStream":
        return self

    async def __anext__(self) -> Any:
        while not self._closed:
            payload = await self._receive()
            if payload is _WAKEUP or self._closed:
                continue
            if self._predicate is None or self._predicate(payload):
                return payload
        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Unregister the stream; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._on_close()
        for callback in self._close_callbacks:
            callback()
        self._close_callbacks.clear()

    def add_close_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the stream closes, immediately if it already has."""
        if self._closed:
            callback()
            return
        self._close_callbacks.append(callback)


class PubSub(ABC):
    """
    Abstract pub/sub adapter.

    One instance is created per process at startup, shared by every request
    and subscription, and stopped at shutdown.
    """

    def __init__(self) -> None:
        self._streams: set[EventStream] = set()

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the adapter accepts publish and subscribe calls."""

    @abstractmethod
    async def start(self) -> None:
        """
        Establish the broker connection.

        Raises:
            EventBusError: If already running or the broker is unreachable
        """

    @abstractmethod
    async def stop(self) -> None:
        """Close every open stream and the broker connection. Never raises."""

    @abstractmethod
    async def publish(self, topic: str, payload: Any) -> int:
        """
        Publish ``payload`` on ``topic``.

        Returns:
            Number of receivers the broker reports the payload reached

        Raises:
            EventBusError: If the adapter is stopped or the broker call fails
        """

    @abstractmethod
    async def subscribe(
        self, topic: str, predicate: Predicate | None = None
    ) -> EventStream:
        """
        Open a stream of payloads published on ``topic`` from now on.

        Raises:
            EventBusError: If the adapter is stopped or the broker call fails
        """

    def subscriber_count(self, topic: str | None = None) -> int:
        """Number of open streams, optionally restricted to one topic."""
        if topic is None:
            return len(self._streams)
        return sum(1 for stream in self._streams if stream.topic == topic)

    def _open_stream(
        self,
        topic: str,
        receive: Callable[[], Awaitable[Any]],
        predicate: Predicate | None,
        release: Callable[[], Awaitable[None]],
    ) -> EventStream:
        async def on_close() -> None:
            self._streams.discard(stream)
            await release()
            logger.debug("Subscription stream closed", topic=topic)

        stream = EventStream(topic, receive, predicate, on_close)
        self._streams.add(stream)
        logger.debug(
            "Subscription stream opened", topic=topic, open_streams=len(self._streams)
        )
        return stream

    async def _close_streams(self) -> None:
        for stream in list(self._streams):
            await stream.aclose()


class InMemoryPubSub(PubSub):
    """
    Single-process pub/sub backed by one bounded queue per subscription.

    Predicates run at publish time, so a queue only ever holds events its
    subscriber accepts. A subscriber whose queue is full misses the event;
    the drop is logged.
    """

    def __init__(self, max_queue_size: int = 1000):
        super().__init__()
        self.max_queue_size = max_queue_size
        self._queues: dict[str, dict[asyncio.Queue, Predicate | None]] = defaultdict(dict)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            raise EventBusError("In-memory pub/sub is already running")

        self._running = True
        logger.info("In-memory pub/sub started", max_queue_size=self.max_queue_size)

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        await self._close_streams()
        self._queues.clear()
        logger.info("In-memory pub/sub stopped")

    async def publish(self, topic: str, payload: Any) -> int:
        self._ensure_running("publish")

        delivered = 0
        for queue, predicate in list(self._queues.get(topic, {}).items()):
            if predicate is not None and not self._accepts(topic, predicate, payload):
                continue
            try:
                queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Subscriber queue full, dropping event", topic=topic)

        logger.info("Published event", topic=topic, receivers=delivered)
        return delivered

    async def subscribe(
        self, topic: str, predicate: Predicate | None = None
    ) -> EventStream:
        self._ensure_running("subscribe")

        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._queues[topic][queue] = predicate

        async def release() -> None:
            queues = self._queues.get(topic)
            if queues is not None:
                queues.pop(queue, None)
                if not queues:
                    del self._queues[topic]
            # Wake a reader blocked on get() so it observes the close
            with contextlib.suppress(asyncio.QueueFull):
                queue.put_nowait(_WAKEUP)

        return self._open_stream(topic, queue.get, None, release)

    def _ensure_running(self, operation: str) -> None:
        if not self._running:
            raise EventBusError(f"Cannot {operation}: in-memory pub/sub is not running")

    @staticmethod
    def _accepts(topic: str, predicate: Predicate, payload: Any) -> bool:
        try:
            return bool(predicate(payload))
        except Exception:
            logger.exception("Subscription predicate failed, skipping subscriber", topic=topic)
            return False


def _encode(value: Any) -> Any:
    """JSON fallback for payload values."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RedisPubSub(PubSub):
    """
    Redis-backed pub/sub for multi-process deployments.

    Topics map to channels ``<channel_prefix>:<topic>``. Payloads travel as
    JSON, so subscribers receive plain dicts: dataclasses arrive as dicts
    and datetimes as ISO-8601 strings.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        channel_prefix: str = "githunt",
        connect_timeout: float = 15.0,
        retry_on_timeout: bool = True,
        poll_interval: float = 1.0,
    ):
        super().__init__()
        self.redis_url = redis_url
        self.channel_prefix = channel_prefix
        self.connect_timeout = connect_timeout
        self.retry_on_timeout = retry_on_timeout
        self.poll_interval = poll_interval
        self._redis: aioredis.Redis | None = None

    @property
    def is_running(self) -> bool:
        return self._redis is not None

    def channel_for(self, topic: str) -> str:
        return f"{self.channel_prefix}:{topic}"

    async def start(self) -> None:
        if self._redis is not None:
            raise EventBusError("Redis pub/sub is already running")

        client = aioredis.from_url(
            self.redis_url,
            socket_connect_timeout=self.connect_timeout,
            retry_on_timeout=self.retry_on_timeout,
        )
        try:
            await client.ping()
        except RedisError as e:
            await client.aclose()
            raise EventBusError(f"Failed to connect to Redis: {e}") from e

        self._redis = client
        logger.info(
            "Redis pub/sub started",
            redis_url=self.redis_url,
            channel_prefix=self.channel_prefix,
        )

    async def stop(self) -> None:
        if self._redis is None:
            return

        await self._close_streams()
        try:
            await self._redis.aclose()
        except RedisError as e:
            logger.warning("Error closing Redis connection", error=str(e))
        self._redis = None
        logger.info("Redis pub/sub stopped")

    async def publish(self, topic: str, payload: Any) -> int:
        client = self._require_client("publish")
        channel = self.channel_for(topic)

        try:
            data = json.dumps(payload, default=_encode)
        except (TypeError, ValueError) as e:
            raise EventBusError(f"Payload for {topic} is not serializable: {e}") from e

        try:
            receivers = await client.publish(channel, data)
        except RedisError as e:
            logger.exception("Failed to publish event to Redis", topic=topic, channel=channel)
            raise EventBusError(f"Redis publish failed: {e}") from e

        logger.info("Published event", topic=topic, channel=channel, receivers=receivers)
        return receivers

    async def subscribe(
        self, topic: str, predicate: Predicate | None = None
    ) -> EventStream:
        client = self._require_client("subscribe")
        channel = self.channel_for(topic)

        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(channel)
        except RedisError as e:
            await pubsub.aclose()
            raise EventBusError(f"Redis subscribe failed for {channel}: {e}") from e

        async def receive() -> Any:
            try:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=self.poll_interval
                )
            except (RedisError, RuntimeError):
                # The connection is torn down underneath a pending read on close
                if stream.closed:
                    return _WAKEUP
                raise

            if message is None:
                return _WAKEUP

            try:
                return json.loads(message["data"])
            except (TypeError, ValueError):
                logger.warning("Discarding undecodable message", channel=channel)
                return _WAKEUP

        async def release() -> None:
            try:
                await pubsub.unsubscribe(channel)
                await pubsub.aclose()
            except RedisError as e:
                logger.warning(
                    "Error closing Redis subscription", channel=channel, error=str(e)
                )

        stream = self._open_stream(topic, receive, predicate, release)
        return stream

    def _require_client(self, operation: str) -> aioredis.Redis:
        if self._redis is None:
            raise EventBusError(f"Cannot {operation}: Redis pub/sub is not running")
        return self._redis


def create_pubsub(config: EventBusConfig) -> PubSub:
    """
    Create the pub/sub adapter selected by ``config.mode``.

    Raises:
        ValueError: If the mode is unknown
    """
    if config.mode == EventBusMode.MEMORY:
        return InMemoryPubSub(max_queue_size=config.max_queue_size)

    if config.mode == EventBusMode.REDIS:
        return RedisPubSub(
            redis_url=config.redis_url,
            channel_prefix=config.channel_prefix,
            connect_timeout=config.connect_timeout,
            retry_on_timeout=config.retry_on_timeout,
        )

    raise ValueError(f"Unknown event bus mode: {config.mode}")


__all__ = [
    "EventStream",
    "InMemoryPubSub",
    "Predicate",
    "PubSub",
    "RedisPubSub",
    "create_pubsub",
]
