"""Realtime feed abstract interfaces.

A feed delivers row-level change events for one identity's messages.
Stores that own the message collection publish through a
ChangePublisher; synchronizers consume through a RealtimeFeed.
"""

from abc import ABC, abstractmethod

from padi.transcript.models import ChangeEvent


def topic_for(prefix: str, owner_id: str) -> str:
    """Per-identity topic name."""
    return f"{prefix}{owner_id}"


class RealtimeSubscription(ABC):
    """Async iterator over change events for one owner.

    Iteration raises RealtimeChannelError when the channel fails and
    stops when the subscription is closed.
    """

    owner_id: str

    def __aiter__(self) -> "RealtimeSubscription":
        return self

    @abstractmethod
    async def __anext__(self) -> ChangeEvent:
        """Wait for the next change event."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Unsubscribe and release the channel."""
        pass


class RealtimeFeed(ABC):
    """Source of per-identity change subscriptions."""

    @abstractmethod
    async def subscribe(self, owner_id: str) -> RealtimeSubscription:
        """Open a subscription to an owner's message changes.

        Raises:
            RealtimeChannelError: If the channel cannot be opened
        """
        pass


class ChangePublisher(ABC):
    """Sink for change events emitted after message writes."""

    @abstractmethod
    async def publish(self, owner_id: str, event: ChangeEvent) -> None:
        """Deliver `event` to the owner's subscribers."""
        pass
