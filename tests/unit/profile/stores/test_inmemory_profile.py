"""Tests for InMemoryProfileStore."""

import pytest

from padi.errors import CreateConflictError, PersistError, VersionConflictError
from padi.profile.enums import Tier
from padi.profile.models import Profile
from padi.profile.stores import InMemoryProfileStore


@pytest.fixture
def store() -> InMemoryProfileStore:
    """Create a fresh store for each test."""
    return InMemoryProfileStore()


@pytest.fixture
def sample_profile() -> Profile:
    return Profile(id="user-1", points=5000, saved_items=["recipe"])


class TestInsertAndGet:
    """Tests for insert and get."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store, sample_profile):
        """Should store the row with version 1."""
        stored = await store.insert(sample_profile)
        retrieved = await store.get("user-1")

        assert stored.version == 1
        assert retrieved is not None
        assert retrieved.points == 5000
        assert retrieved.version == 1

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get("nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_insert_conflicts(self, store, sample_profile):
        await store.insert(sample_profile)
        with pytest.raises(CreateConflictError):
            await store.insert(sample_profile)

    @pytest.mark.asyncio
    async def test_returns_copies(self, store, sample_profile):
        """Should not share objects with the stored row."""
        await store.insert(sample_profile)
        retrieved = await store.get("user-1")
        retrieved.saved_items.append("mutated")

        again = await store.get("user-1")
        assert again.saved_items == ["recipe"]


class TestUpdate:
    """Tests for whole-field updates."""

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, store, sample_profile):
        await store.insert(sample_profile)
        updated = await store.update("user-1", {"tier": Tier.PREMIUM, "points": 10})

        assert updated.tier == Tier.PREMIUM
        assert updated.points == 10
        assert updated.version == 2

    @pytest.mark.asyncio
    async def test_update_with_matching_version(self, store, sample_profile):
        await store.insert(sample_profile)
        updated = await store.update("user-1", {"points": 1}, expected_version=1)
        assert updated.version == 2

    @pytest.mark.asyncio
    async def test_update_with_stale_version_conflicts(self, store, sample_profile):
        """Should reject a compare-and-set write against an old version."""
        await store.insert(sample_profile)
        await store.update("user-1", {"points": 1})

        with pytest.raises(VersionConflictError) as exc_info:
            await store.update("user-1", {"points": 2}, expected_version=1)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        assert (await store.get("user-1")).points == 1

    @pytest.mark.asyncio
    async def test_update_missing_row(self, store):
        with pytest.raises(PersistError):
            await store.update("nobody", {"points": 1})

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_balance(self, store, sample_profile):
        await store.insert(sample_profile)
        with pytest.raises(PersistError):
            await store.update("user-1", {"points": -1})

    @pytest.mark.asyncio
    async def test_update_rejects_admin_flag(self, store, sample_profile):
        await store.insert(sample_profile)
        with pytest.raises(PersistError):
            await store.update("user-1", {"is_admin": True})
