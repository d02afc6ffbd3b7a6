"""In-memory implementation of ProfileStore."""

from typing import Any

from pydantic import ValidationError

from padi.errors import CreateConflictError, PersistError, VersionConflictError
from padi.profile.models import Profile, utc_now
from padi.profile.store import ProfileStore


class InMemoryProfileStore(ProfileStore):
    """In-memory implementation of ProfileStore for testing and development.

    Stores copies so callers never share objects with the stored rows,
    matching the behaviour of a remote collection.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._profiles: dict[str, Profile] = {}

    async def get(self, identity_id: str) -> Profile | None:
        """Get the profile for an identity."""
        profile = self._profiles.get(identity_id)
        return profile.model_copy(deep=True) if profile else None

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile, returning the stored row."""
        if profile.id in self._profiles:
            raise CreateConflictError(f"Profile already exists: {profile.id}")

        stored = profile.model_copy(deep=True, update={"version": 1})
        stored.created_at = utc_now()
        stored.updated_at = stored.created_at
        self._profiles[profile.id] = stored
        return stored.model_copy(deep=True)

    async def update(
        self,
        identity_id: str,
        changes: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Profile:
        """Replace whole fields of a profile, returning the stored row."""
        existing = self._profiles.get(identity_id)
        if existing is None:
            raise PersistError(f"Profile not found: {identity_id}")

        if expected_version is not None and existing.version != expected_version:
            raise VersionConflictError(
                f"Profile {identity_id} changed concurrently",
                expected_version=expected_version,
                actual_version=existing.version,
            )

        try:
            updated = existing.with_changes(changes)
        except (ValidationError, ValueError) as e:
            raise PersistError(f"Invalid profile update: {e}", cause=e) from e

        self._profiles[identity_id] = updated
        return updated.model_copy(deep=True)
