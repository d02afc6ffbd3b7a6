"""Tests for Session and FencingToken."""

import pytest

from padi.errors import IdentityUnavailableError, ProfileNotHydratedError
from padi.profile.models import Profile
from padi.session.models import FencingToken, SessionState


class TestFencing:
    """Tests for fencing tokens."""

    def test_accepts_own_token(self, make_session) -> None:
        session = make_session("user-1", generation=3)
        token = session.fence()

        assert token == FencingToken(identity_id="user-1", generation=3)
        assert session.accepts(token)

    def test_rejects_other_generation(self, make_session) -> None:
        """Should reject tokens issued for an earlier binding of the same identity."""
        old = make_session("user-1", generation=1)
        new = make_session("user-1", generation=2)

        assert not new.accepts(old.fence())

    def test_rejects_after_revoke(self, make_session) -> None:
        session = make_session("user-1")
        token = session.fence()
        session.revoke()

        assert session.state == SessionState.UNBOUND
        assert not session.accepts(token)


class TestLifecycle:
    """Tests for hydration state transitions."""

    def test_starts_provisional(self, make_session) -> None:
        session = make_session("user-1")

        assert session.is_active
        assert not session.is_hydrated
        with pytest.raises(ProfileNotHydratedError):
            session.require_hydrated()

    def test_mark_hydrated(self, make_session) -> None:
        session = make_session("user-1")
        session.mark_hydrated(Profile(id="user-1", points=9))

        assert session.is_hydrated
        assert session.profile.points == 9
        session.require_hydrated()

    def test_revoked_requires_active(self, make_session) -> None:
        session = make_session("user-1", profile=Profile(id="user-1"))
        session.revoke()

        with pytest.raises(IdentityUnavailableError):
            session.require_active()

    def test_language_follows_profile(self, make_session) -> None:
        session = make_session(
            "user-1", profile=Profile(id="user-1", personalization={"language": "Igbo"})
        )
        assert session.language == "Igbo"


class TestFieldOwnership:
    """Tests for tracking which local write last set a field."""

    def test_latest_claim_owns_field(self, make_session) -> None:
        session = make_session()
        first, displaced = session.claim_field("points")
        second, _ = session.claim_field("points")

        assert displaced is None
        assert not session.owns_field("points", first)
        assert session.owns_field("points", second)

    def test_adopting_stored_value_ends_ownership(self, make_session) -> None:
        session = make_session(profile=Profile(id="user-1", points=50))
        seq, _ = session.claim_field("points")

        session.adopt_confirmed("points", 40)

        assert session.profile.points == 40
        assert not session.owns_field("points", seq)

    def test_hydration_clears_claims(self, make_session) -> None:
        session = make_session()
        seq, _ = session.claim_field("saved_items")

        session.mark_hydrated(Profile(id="user-1"))

        assert not session.owns_field("saved_items", seq)
