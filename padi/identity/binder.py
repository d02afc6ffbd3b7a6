"""Identity binder: auth events to provisional sessions.

A signed-in event yields a Session immediately, built from defaults, so
presentation never waits on the network; the authoritative profile is
hydrated afterwards. Repeated events for the same identity (token
refresh, user update) keep the existing session.
"""

from padi.identity.models import AuthEvent, IdentityEvent
from padi.observability.logging import get_logger
from padi.profile.models import Profile
from padi.session.models import Session

logger = get_logger(__name__)


class IdentityBinder:
    """Turns identity events into session handles."""

    def __init__(self, default_personalization: dict[str, str] | None = None) -> None:
        self._default_personalization = default_personalization
        self._generation = 0

    def on_identity_event(
        self, event: IdentityEvent, current: Session | None
    ) -> Session | None:
        """Return the session that should be current after `event`.

        Returns None on sign-out, `current` itself when the identity is
        unchanged, or a new provisional Session otherwise.
        """
        identity = event.identity
        if event.event == AuthEvent.SIGNED_OUT or identity is None:
            if current is not None:
                logger.info("identity_unbound", identity_id=current.identity_id)
            return None

        if (
            current is not None
            and current.is_active
            and current.identity_id == identity.id
        ):
            if current.email != identity.email:
                current.email = identity.email
            return current

        self._generation += 1
        session = Session(
            identity_id=identity.id,
            email=identity.email,
            generation=self._generation,
            profile=Profile.provisional(identity.id, self._default_personalization),
        )
        logger.info(
            "identity_bound",
            identity_id=identity.id,
            auth_event=event.event.value,
            generation=self._generation,
        )
        return session
