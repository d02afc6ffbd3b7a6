"""Tests for ProfilePatcher merge-patch operations."""

import pytest

from padi.errors import PersistError
from padi.profile.patch import ProfilePatcher


@pytest.fixture
def patcher(profile_store) -> ProfilePatcher:
    return ProfilePatcher(profile_store, max_cas_attempts=3)


def refuse_writes(store, monkeypatch) -> None:
    async def failing_update(*args, **kwargs):
        raise PersistError("write refused")

    monkeypatch.setattr(store, "update", failing_update)


class TestPersonalization:
    """Tests for personalization merges."""

    @pytest.mark.asyncio
    async def test_merge_keeps_other_keys(self, patcher, profile_store, stored_session):
        session = await stored_session()

        assert await patcher.merge_personalization(session, {"Name": "Ada"})

        stored = await profile_store.get("user-1")
        assert stored.personalization["Name"] == "Ada"
        assert stored.personalization["Location"] == "the cloud"
        assert session.profile.personalization == stored.personalization

    @pytest.mark.asyncio
    async def test_merge_over_fresh_server_values(
        self, patcher, profile_store, stored_session
    ):
        """Should merge onto the stored map, not the possibly stale local one."""
        session = await stored_session()
        other = await profile_store.get("user-1")
        await profile_store.update(
            "user-1",
            {"personalization": {**other.personalization, "Interests": "chess"}},
        )

        assert await patcher.merge_personalization(session, {"Name": "Ada"})

        stored = await profile_store.get("user-1")
        assert stored.personalization["Interests"] == "chess"
        assert stored.personalization["Name"] == "Ada"
        assert session.profile.personalization["Interests"] == "chess"

    @pytest.mark.asyncio
    async def test_update_language_round_trip(
        self, patcher, profile_store, stored_session, make_session
    ):
        """A language written by one session is read back by the next."""
        session = await stored_session()

        assert await patcher.update_language(session, "Swahili")

        assert session.language == "Swahili"
        reloaded = make_session("user-1", profile=await profile_store.get("user-1"))
        assert reloaded.language == "Swahili"

    @pytest.mark.asyncio
    async def test_failure_rolls_back(
        self, patcher, profile_store, stored_session, monkeypatch
    ):
        session = await stored_session()
        before = dict(session.profile.personalization)
        refuse_writes(profile_store, monkeypatch)

        assert await patcher.merge_personalization(session, {"Name": "Ada"}) is False
        assert session.profile.personalization == before

    @pytest.mark.asyncio
    async def test_revoked_session_is_rejected(self, patcher, stored_session):
        session = await stored_session()
        session.revoke()

        assert await patcher.update_language(session, "French") is False


class TestSavedItems:
    """Tests for saved-item edits."""

    @pytest.mark.asyncio
    async def test_add_item(self, patcher, profile_store, stored_session):
        session = await stored_session(saved_items=["a"])

        assert await patcher.add_saved_item(session, "b")

        assert session.profile.saved_items == ["a", "b"]
        assert (await profile_store.get("user-1")).saved_items == ["a", "b"]

    @pytest.mark.asyncio
    async def test_add_existing_item_is_noop(self, patcher, profile_store, stored_session):
        session = await stored_session(saved_items=["a"])

        assert await patcher.add_saved_item(session, "a")
        assert (await profile_store.get("user-1")).version == 1

    @pytest.mark.asyncio
    async def test_remove_by_index_targets_value(
        self, patcher, profile_store, stored_session
    ):
        """Should remove the value shown locally even if the stored list shifted."""
        session = await stored_session(saved_items=["a", "b", "c"])
        await profile_store.update("user-1", {"saved_items": ["new", "a", "b", "c"]})

        assert await patcher.remove_saved_item(session, 1)

        assert (await profile_store.get("user-1")).saved_items == ["new", "a", "c"]
        assert session.profile.saved_items == ["new", "a", "c"]

    @pytest.mark.asyncio
    async def test_remove_out_of_range(self, patcher, stored_session):
        session = await stored_session(saved_items=["a"])

        assert await patcher.remove_saved_item(session, 5) is False
        assert await patcher.remove_saved_item(session, -1) is False
        assert session.profile.saved_items == ["a"]

    @pytest.mark.asyncio
    async def test_replace_deduplicates(self, patcher, profile_store, stored_session):
        session = await stored_session(saved_items=["a"])

        assert await patcher.replace_saved_items(session, ["x", "y", "x"])
        assert (await profile_store.get("user-1")).saved_items == ["x", "y"]

    @pytest.mark.asyncio
    async def test_add_failure_rolls_back(
        self, patcher, profile_store, stored_session, monkeypatch
    ):
        session = await stored_session(saved_items=["a"])
        refuse_writes(profile_store, monkeypatch)

        assert await patcher.add_saved_item(session, "b") is False
        assert session.profile.saved_items == ["a"]


class TestMergePatch:
    """Tests for merge_patch dispatch."""

    @pytest.mark.asyncio
    async def test_requires_exactly_one_field(self, patcher, stored_session):
        session = await stored_session()

        with pytest.raises(ValueError):
            await patcher.merge_patch(session)
        with pytest.raises(ValueError):
            await patcher.merge_patch(session, language="French", saved_items=["a"])

    @pytest.mark.asyncio
    async def test_dispatches_language(self, patcher, stored_session):
        session = await stored_session()

        assert await patcher.merge_patch(session, language="French")
        assert session.language == "French"
