"""Factories for building the session core from configuration.

Backend selection comes from TOML (`[storage]`). Connection strings come
from environment variables:
- PADI_DATABASE_URL or DATABASE_URL: PostgreSQL connection string
- PADI_REDIS_URL or REDIS_URL: Redis URL for the realtime feed
  (defaults to redis://localhost:6379/0)
"""

import os

from padi.config import Settings, get_settings
from padi.config.models.storage import StorageConfig
from padi.config.models.transcript import TranscriptConfig
from padi.db.pool import PostgresPool
from padi.identity.provider import IdentityProvider
from padi.observability.logging import get_logger, setup_logging
from padi.profile.store import ProfileStore
from padi.profile.stores.inmemory import InMemoryProfileStore
from padi.session.consent import ConsentStore
from padi.session.orchestrator import SessionOrchestrator
from padi.transcript.realtime.feed import ChangePublisher, RealtimeFeed
from padi.transcript.realtime.inmemory import InMemoryRealtimeFeed
from padi.transcript.store import MessageStore
from padi.transcript.stores.inmemory import InMemoryMessageStore

logger = get_logger(__name__)


def create_pool(config: StorageConfig) -> PostgresPool:
    """Create a lazily connecting PostgreSQL pool."""
    return PostgresPool(
        min_size=config.min_pool_size,
        max_size=config.max_pool_size,
        command_timeout=config.command_timeout,
    )


def create_realtime_feed(
    storage: StorageConfig, transcript: TranscriptConfig
) -> RealtimeFeed:
    """Create a realtime feed based on configuration.

    Raises:
        ValueError: If backend type is not supported
    """
    backend = storage.realtime_backend

    if backend == "inmemory":
        logger.info("creating_realtime_feed", backend="inmemory")
        return InMemoryRealtimeFeed(topic_prefix=transcript.topic_prefix)

    elif backend == "redis":
        import redis.asyncio as redis

        from padi.transcript.realtime.redis import RedisRealtimeFeed

        url = (
            os.environ.get("PADI_REDIS_URL")
            or os.environ.get("REDIS_URL")
            or "redis://localhost:6379/0"
        )
        logger.info("creating_realtime_feed", backend="redis")
        client = redis.from_url(url)
        return RedisRealtimeFeed(client, topic_prefix=transcript.topic_prefix)

    raise ValueError(f"Unsupported realtime backend: {backend}")


def create_profile_store(
    config: StorageConfig, pool: PostgresPool | None = None
) -> ProfileStore:
    """Create a ProfileStore instance based on configuration.

    Raises:
        ValueError: If backend type is not supported
    """
    if config.backend == "inmemory":
        logger.info("creating_profile_store", backend="inmemory")
        return InMemoryProfileStore()

    elif config.backend == "postgres":
        from padi.profile.stores.postgres import PostgresProfileStore

        logger.info("creating_profile_store", backend="postgres")
        return PostgresProfileStore(pool or create_pool(config))

    raise ValueError(f"Unsupported storage backend: {config.backend}")


def create_message_store(
    config: StorageConfig,
    publisher: ChangePublisher | None = None,
    pool: PostgresPool | None = None,
) -> MessageStore:
    """Create a MessageStore instance based on configuration.

    Committed writes are published through `publisher` when one is given.

    Raises:
        ValueError: If backend type is not supported
    """
    if config.backend == "inmemory":
        logger.info("creating_message_store", backend="inmemory")
        return InMemoryMessageStore(publisher=publisher)

    elif config.backend == "postgres":
        from padi.transcript.stores.postgres import PostgresMessageStore

        logger.info("creating_message_store", backend="postgres")
        return PostgresMessageStore(pool or create_pool(config), publisher=publisher)

    raise ValueError(f"Unsupported storage backend: {config.backend}")


def create_orchestrator(
    identity_provider: IdentityProvider,
    consent_store: ConsentStore | None = None,
    settings: Settings | None = None,
) -> SessionOrchestrator:
    """Wire stores, the realtime feed and the orchestrator from settings.

    Also configures logging from `observability.logging`.
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )
    storage = settings.storage

    pool = create_pool(storage) if storage.backend == "postgres" else None
    feed = create_realtime_feed(storage, settings.transcript)
    publisher = feed if isinstance(feed, ChangePublisher) else None

    return SessionOrchestrator(
        identity_provider=identity_provider,
        profile_store=create_profile_store(storage, pool),
        message_store=create_message_store(storage, publisher, pool),
        feed=feed,
        consent_store=consent_store,
        settings=settings,
    )
