"""Tests for backend factories."""

import pytest

from padi.config.models.storage import StorageConfig
from padi.config.models.transcript import TranscriptConfig
from padi.config.settings import Settings
from padi.factory import (
    create_message_store,
    create_orchestrator,
    create_profile_store,
    create_realtime_feed,
)
from padi.identity import InMemoryIdentityProvider
from padi.profile.stores import InMemoryProfileStore, PostgresProfileStore
from padi.transcript.realtime import InMemoryRealtimeFeed
from padi.transcript.realtime.redis import RedisRealtimeFeed
from padi.transcript.stores import InMemoryMessageStore, PostgresMessageStore


class TestCreateStores:
    """Tests for store selection."""

    def test_inmemory_backends(self) -> None:
        config = StorageConfig(backend="inmemory")

        assert isinstance(create_profile_store(config), InMemoryProfileStore)
        assert isinstance(create_message_store(config), InMemoryMessageStore)

    def test_postgres_backends_share_pool(self, env_override) -> None:
        """Should build lazily connecting stores without touching the network."""
        config = StorageConfig(backend="postgres")

        with env_override({"PADI_DATABASE_URL": "postgresql://u:p@localhost/padi"}):
            profiles = create_profile_store(config)
            messages = create_message_store(config)

        assert isinstance(profiles, PostgresProfileStore)
        assert isinstance(messages, PostgresMessageStore)

    def test_redis_feed(self, env_override) -> None:
        storage = StorageConfig(realtime_backend="redis")

        with env_override({"PADI_REDIS_URL": "redis://localhost:6379/1"}):
            feed = create_realtime_feed(storage, TranscriptConfig())

        assert isinstance(feed, RedisRealtimeFeed)

    def test_inmemory_feed(self) -> None:
        feed = create_realtime_feed(StorageConfig(), TranscriptConfig())
        assert isinstance(feed, InMemoryRealtimeFeed)


class TestCreateOrchestrator:
    """Tests for orchestrator wiring."""

    @pytest.mark.asyncio
    async def test_wires_inmemory_stack(self) -> None:
        orchestrator = create_orchestrator(
            InMemoryIdentityProvider(), settings=Settings()
        )

        assert orchestrator.session is None
        assert len(orchestrator.offers) == 3
        assert not orchestrator.has_history
