"""ProfileStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any

from padi.profile.models import Profile


class ProfileStore(ABC):
    """Abstract interface for the remote profile collection.

    Rows are keyed by identity id. Implementations raise FetchError on
    read failures, PersistError on write failures, CreateConflictError
    when inserting an existing id and VersionConflictError when a
    compare-and-set update finds a different version.
    """

    @abstractmethod
    async def get(self, identity_id: str) -> Profile | None:
        """Get the profile for an identity."""
        pass

    @abstractmethod
    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile, returning the stored row."""
        pass

    @abstractmethod
    async def update(
        self,
        identity_id: str,
        changes: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Profile:
        """Replace whole fields of a profile, returning the stored row.

        When `expected_version` is given the update only applies if the
        stored row still has that version.
        """
        pass
