"""MessageStore implementations."""

from padi.transcript.stores.inmemory import InMemoryMessageStore
from padi.transcript.stores.postgres import PostgresMessageStore

__all__ = ["InMemoryMessageStore", "PostgresMessageStore"]
