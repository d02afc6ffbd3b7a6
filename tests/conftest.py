"""Fixtures shared by the unit and integration suites."""

from collections.abc import Callable, Generator, Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Any

import pytest

from padi.config import get_settings
from padi.config.models.ledger import LedgerConfig
from padi.config.models.transcript import TranscriptConfig
from padi.profile.enums import Tier
from padi.profile.models import Profile
from padi.profile.stores.inmemory import InMemoryProfileStore
from padi.session.models import Session, SessionState
from padi.transcript.realtime.inmemory import InMemoryRealtimeFeed
from padi.transcript.stores.inmemory import InMemoryMessageStore

ADMIN_EMAIL = "super@user.com"


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Empty `config/` directory under the test's tmp_path."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Write `{filename: toml_text}` pairs into `test_config_dir`."""

    def _write(files: dict[str, str]) -> None:
        for name, text in files.items():
            (test_config_dir / name).write_text(text)

    return _write


@pytest.fixture
def env_override(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[dict[str, str]], AbstractContextManager[None]]:
    """Set environment variables for the duration of a `with` block.

        with env_override({"PADI_DEBUG": "true"}):
            ...
    """

    @contextmanager
    def _override(overrides: dict[str, str]) -> Iterator[None]:
        with monkeypatch.context() as patch:
            for key, value in overrides.items():
                patch.setenv(key, value)
            yield

    return _override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Every test starts and ends with no cached Settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    """Create a fresh profile store for each test."""
    return InMemoryProfileStore()


@pytest.fixture
def feed() -> InMemoryRealtimeFeed:
    return InMemoryRealtimeFeed()


@pytest.fixture
def message_store(feed: InMemoryRealtimeFeed) -> InMemoryMessageStore:
    """Message store that publishes its writes to `feed`."""
    return InMemoryMessageStore(publisher=feed)


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(admin_emails=[ADMIN_EMAIL])


@pytest.fixture
def transcript_config() -> TranscriptConfig:
    """Transcript config with reconnect delays short enough for tests."""
    return TranscriptConfig(reconnect_base_seconds=0.01, reconnect_max_seconds=0.02)


@pytest.fixture
def make_session() -> Callable[..., Session]:
    """Factory for sessions, provisional unless a profile is given."""

    def _make_session(
        identity_id: str = "user-1",
        *,
        generation: int = 1,
        email: str | None = "user@example.com",
        profile: Profile | None = None,
    ) -> Session:
        return Session(
            identity_id=identity_id,
            email=email,
            generation=generation,
            profile=profile or Profile.provisional(identity_id),
            state=SessionState.HYDRATED if profile else SessionState.PROVISIONAL,
        )

    return _make_session


@pytest.fixture
def stored_session(
    profile_store: InMemoryProfileStore, make_session: Callable[..., Session]
) -> Callable[..., Any]:
    """Insert a profile row and return a hydrated session over it."""

    async def _stored_session(
        identity_id: str = "user-1",
        *,
        points: int = 200,
        tier: Tier = Tier.FREE,
        is_admin: bool = False,
        saved_items: list[str] | None = None,
    ) -> Session:
        row = await profile_store.insert(
            Profile(
                id=identity_id,
                tier=tier,
                points=points,
                is_admin=is_admin,
                saved_items=saved_items or [],
            )
        )
        return make_session(identity_id, profile=row)

    return _stored_session
