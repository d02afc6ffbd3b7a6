"""Realtime change feeds."""

from padi.transcript.realtime.feed import (
    ChangePublisher,
    RealtimeFeed,
    RealtimeSubscription,
    topic_for,
)
from padi.transcript.realtime.inmemory import InMemoryRealtimeFeed, InMemorySubscription

__all__ = [
    "ChangePublisher",
    "InMemoryRealtimeFeed",
    "InMemorySubscription",
    "RealtimeFeed",
    "RealtimeSubscription",
    "topic_for",
]
