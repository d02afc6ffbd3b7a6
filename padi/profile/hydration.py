"""Profile hydration: load, back-fill or create the profile for an identity.

Hydration replaces the provisional profile on a Session with the stored
row. It never raises: failures are logged and the session stays
provisional until the next attempt.
"""

import time

from padi.errors import CreateConflictError, FetchError, PadiError
from padi.observability.logging import get_logger
from padi.observability.metrics import HYDRATION_LATENCY, HYDRATIONS, STALE_RESPONSES
from padi.profile.enums import Tier
from padi.profile.models import (
    DEFAULT_PERSONALIZATION,
    REQUIRED_PERSONALIZATION_KEYS,
    Profile,
)
from padi.profile.store import ProfileStore
from padi.session.models import Session

logger = get_logger(__name__)


class ProfileHydrator:
    """Loads or provisions the profile row behind a session."""

    def __init__(
        self,
        store: ProfileStore,
        *,
        admin_emails: list[str] | None = None,
        initial_points: int = 5000,
        default_personalization: dict[str, str] | None = None,
    ) -> None:
        self._store = store
        self._admin_emails = frozenset(e.lower() for e in admin_emails or [])
        self._initial_points = initial_points
        self._defaults = dict(default_personalization or DEFAULT_PERSONALIZATION)

    def is_admin_email(self, email: str | None) -> bool:
        """Case-insensitive allow-list check."""
        return bool(email) and email.strip().lower() in self._admin_emails

    def backfill(self, personalization: dict[str, str]) -> tuple[dict[str, str], bool]:
        """Fill missing or empty required keys with defaults.

        Present values are never overwritten. Returns the filled map and
        whether anything changed.
        """
        filled = dict(personalization)
        changed = False
        for key in REQUIRED_PERSONALIZATION_KEYS:
            if not filled.get(key):
                filled[key] = self._defaults.get(key, DEFAULT_PERSONALIZATION[key])
                changed = True
        return filled, changed

    def new_profile(self, identity_id: str, email: str | None) -> Profile:
        """Build the first profile row for an identity."""
        is_admin = self.is_admin_email(email)
        return Profile(
            id=identity_id,
            tier=Tier.ADMIN if is_admin else Tier.FREE,
            points=self._initial_points,
            is_admin=is_admin,
            personalization=self.backfill({})[0],
            saved_items=[],
        )

    async def _repair(self, profile: Profile) -> Profile:
        """Write back a back-filled personalization map, best effort."""
        filled, changed = self.backfill(profile.personalization)
        if not changed:
            return profile

        try:
            repaired = await self._store.update(
                profile.id,
                {"personalization": filled},
                expected_version=profile.version,
            )
            logger.info("profile_backfilled", identity_id=profile.id)
            return repaired
        except PadiError as e:
            logger.warning(
                "profile_backfill_failed",
                identity_id=profile.id,
                error=str(e),
            )
            return profile.model_copy(update={"personalization": filled})

    async def load_or_create(self, identity_id: str, email: str | None) -> Profile:
        """Return the stored profile, creating it on first sign-in.

        A concurrent hydration from another device may insert the row
        first; the insert conflict is resolved by reading that row.

        Raises:
            FetchError: If the row cannot be read
            PersistError: If a new row cannot be inserted
        """
        existing = await self._store.get(identity_id)
        if existing is not None:
            return await self._repair(existing)

        try:
            created = await self._store.insert(self.new_profile(identity_id, email))
            logger.info(
                "profile_created",
                identity_id=identity_id,
                tier=created.tier.value,
                is_admin=created.is_admin,
            )
            return created
        except CreateConflictError:
            logger.info("profile_create_conflict_refetch", identity_id=identity_id)
            existing = await self._store.get(identity_id)
            if existing is None:
                raise FetchError(
                    f"Profile for {identity_id} conflicted on insert but is missing"
                ) from None
            return await self._repair(existing)

    async def hydrate(self, session: Session) -> Profile | None:
        """Hydrate `session` from the store.

        Returns the applied profile, or None when hydration failed or the
        session was superseded while the request was in flight.
        """
        token = session.fence()
        start = time.perf_counter()

        try:
            profile = await self.load_or_create(session.identity_id, session.email)
        except PadiError as e:
            HYDRATIONS.labels(outcome="failed").inc()
            logger.error(
                "profile_hydration_failed",
                identity_id=session.identity_id,
                error=str(e),
            )
            return None
        except Exception as e:
            HYDRATIONS.labels(outcome="failed").inc()
            logger.error(
                "profile_hydration_failed",
                identity_id=session.identity_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        finally:
            HYDRATION_LATENCY.observe(time.perf_counter() - start)

        if not session.accepts(token):
            HYDRATIONS.labels(outcome="stale").inc()
            STALE_RESPONSES.labels(operation="hydrate").inc()
            logger.info("stale_response_discarded", operation="hydrate", identity_id=token.identity_id)
            return None

        session.mark_hydrated(profile)
        HYDRATIONS.labels(outcome="hydrated").inc()
        logger.info(
            "profile_hydrated",
            identity_id=session.identity_id,
            tier=profile.tier.value,
        )
        return profile
