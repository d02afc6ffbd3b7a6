"""Tests for IdentityBinder."""

import pytest

from padi.identity import AuthEvent, Identity, IdentityBinder, IdentityEvent
from padi.session.models import SessionState


def signed_in(identity_id: str, email: str | None = None) -> IdentityEvent:
    return IdentityEvent(
        event=AuthEvent.SIGNED_IN, identity=Identity(id=identity_id, email=email)
    )


@pytest.fixture
def binder() -> IdentityBinder:
    return IdentityBinder({"Name": "Padi", "language": "English"})


class TestIdentityBinder:
    """Tests for auth event handling."""

    def test_sign_in_creates_provisional_session(self, binder: IdentityBinder) -> None:
        """Should bind immediately with default personalization."""
        session = binder.on_identity_event(signed_in("user-1", "a@example.com"), None)

        assert session is not None
        assert session.identity_id == "user-1"
        assert session.email == "a@example.com"
        assert session.state == SessionState.PROVISIONAL
        assert session.profile.personalization == {"Name": "Padi", "language": "English"}
        assert session.profile.points == 0

    def test_sign_out_unbinds(self, binder: IdentityBinder) -> None:
        current = binder.on_identity_event(signed_in("user-1"), None)
        event = IdentityEvent(event=AuthEvent.SIGNED_OUT)

        assert binder.on_identity_event(event, current) is None

    def test_same_identity_keeps_session(self, binder: IdentityBinder) -> None:
        """Token refreshes must not reset a hydrated session."""
        current = binder.on_identity_event(signed_in("user-1", "a@example.com"), None)
        refreshed = IdentityEvent(
            event=AuthEvent.TOKEN_REFRESHED,
            identity=Identity(id="user-1", email="b@example.com"),
        )

        session = binder.on_identity_event(refreshed, current)

        assert session is current
        assert session.email == "b@example.com"

    def test_new_identity_gets_new_generation(self, binder: IdentityBinder) -> None:
        first = binder.on_identity_event(signed_in("user-1"), None)
        second = binder.on_identity_event(signed_in("user-2"), first)

        assert second is not first
        assert second.generation > first.generation
        assert not second.accepts(first.fence())

    def test_rebinding_after_revoke(self, binder: IdentityBinder) -> None:
        """Should issue a fresh generation when the same identity signs in again."""
        first = binder.on_identity_event(signed_in("user-1"), None)
        first.revoke()

        second = binder.on_identity_event(signed_in("user-1"), first)

        assert second is not first
        assert not second.accepts(first.fence())

    def test_event_without_identity_unbinds(self, binder: IdentityBinder) -> None:
        event = IdentityEvent(event=AuthEvent.INITIAL_SESSION)
        assert binder.on_identity_event(event, None) is None
