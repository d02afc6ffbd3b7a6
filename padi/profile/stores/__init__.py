"""ProfileStore implementations."""

from padi.profile.stores.inmemory import InMemoryProfileStore
from padi.profile.stores.postgres import PostgresProfileStore

__all__ = ["InMemoryProfileStore", "PostgresProfileStore"]
