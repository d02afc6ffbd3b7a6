"""In-memory realtime feed for testing and development."""

import asyncio
from collections import defaultdict

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


class InMemorySubscription(RealtimeSubscription):
    """Queue-backed subscription owned by an InMemoryRealtimeFeed."""

    def __init__(self, feed: "InMemoryRealtimeFeed", owner_id: str) -> None:
        self.owner_id = owner_id
        self._feed = feed
        # None marks the end of the stream
        self._queue: asyncio.Queue[ChangeEvent | RealtimeChannelError | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, item: ChangeEvent | RealtimeChannelError) -> None:
        if not self._closed:
            self._queue.put_nowait(item)

    async def __anext__(self) -> ChangeEvent:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, RealtimeChannelError):
            raise item
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._detach(self)
        self._queue.put_nowait(None)


class InMemoryRealtimeFeed(RealtimeFeed, ChangePublisher):
    """Fan-out of published events to every open subscription per owner."""

    def __init__(self, topic_prefix: str = "messages-for-") -> None:
        self._topic_prefix = topic_prefix
        self._subscriptions: dict[str, list[InMemorySubscription]] = defaultdict(list)

    def subscriber_count(self, owner_id: str) -> int:
        return len(self._subscriptions.get(owner_id, []))

    async def subscribe(self, owner_id: str) -> InMemorySubscription:
        subscription = InMemorySubscription(self, owner_id)
        self._subscriptions[owner_id].append(subscription)
        logger.debug("realtime_subscribed", topic=topic_for(self._topic_prefix, owner_id))
        return subscription

    async def publish(self, owner_id: str, event: ChangeEvent) -> None:
        for subscription in list(self._subscriptions.get(owner_id, [])):
            subscription.deliver(event.model_copy(deep=True))

    def fail(self, owner_id: str, reason: str = "channel error") -> None:
        """Break every subscription of an owner with a channel error."""
        topic = topic_for(self._topic_prefix, owner_id)
        for subscription in self._subscriptions.pop(owner_id, []):
            subscription.deliver(RealtimeChannelError(f"{topic}: {reason}"))

    def _detach(self, subscription: InMemorySubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.owner_id)
        if subscriptions and subscription in subscriptions:
            subscriptions.remove(subscription)
