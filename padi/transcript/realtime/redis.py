"""Redis pub/sub realtime feed.

Change events are published as JSON on one channel per identity.
"""

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from padi.errors import RealtimeChannelError
from padi.observability.logging import get_logger
from padi.transcript.models import ChangeEvent
from padi.transcript.realtime.feed import (
    ChangePublisher,
    RealtimeFeed,
    RealtimeSubscription,
    topic_for,
)

logger = get_logger(__name__)


class RedisSubscription(RealtimeSubscription):
    """Subscription backed by a dedicated Redis pub/sub connection."""

    def __init__(self, pubsub: redis.client.PubSub, owner_id: str, topic: str) -> None:
        self.owner_id = owner_id
        self._pubsub = pubsub
        self._topic = topic
        self._closed = False

    async def __anext__(self) -> ChangeEvent:
        while not self._closed:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=None
                )
            except RedisError as e:
                raise RealtimeChannelError(
                    f"Redis channel {self._topic} failed: {e}", cause=e
                ) from e

            if message is None or message.get("type") != "message":
                continue

            try:
                return ChangeEvent.model_validate_json(message["data"])
            except ValidationError as e:
                logger.warning("realtime_event_invalid", topic=self._topic, error=str(e))

        raise StopAsyncIteration

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._pubsub.unsubscribe(self._topic)
        finally:
            await self._pubsub.aclose()


class RedisRealtimeFeed(RealtimeFeed, ChangePublisher):
    """Realtime feed over Redis pub/sub."""

    def __init__(self, client: redis.Redis, topic_prefix: str = "messages-for-") -> None:
        """Initialize Redis realtime feed.

        Args:
            client: Redis client instance
            topic_prefix: Channel name prefix per identity
        """
        self._client = client
        self._topic_prefix = topic_prefix

    async def subscribe(self, owner_id: str) -> RedisSubscription:
        topic = topic_for(self._topic_prefix, owner_id)
        pubsub = self._client.pubsub()
        try:
            await pubsub.subscribe(topic)
        except RedisError as e:
            await pubsub.aclose()
            raise RealtimeChannelError(f"Failed to subscribe to {topic}: {e}", cause=e) from e

        logger.debug("realtime_subscribed", topic=topic)
        return RedisSubscription(pubsub, owner_id, topic)

    async def publish(self, owner_id: str, event: ChangeEvent) -> None:
        topic = topic_for(self._topic_prefix, owner_id)
        try:
            await self._client.publish(topic, event.model_dump_json())
        except RedisError as e:
            raise RealtimeChannelError(f"Failed to publish to {topic}: {e}", cause=e) from e
