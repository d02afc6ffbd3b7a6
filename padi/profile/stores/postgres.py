"""PostgreSQL implementation of ProfileStore.

personalization and saved_items are stored as JSONB. Every update bumps
`version`; compare-and-set updates filter on the expected version.
"""

import json
from typing import Any

import asyncpg

from padi.db.pool import PostgresPool
from padi.errors import (
    CreateConflictError,
    FetchError,
    PersistError,
    VersionConflictError,
)
from padi.observability.logging import get_logger
from padi.profile.enums import Tier
from padi.profile.models import UPDATABLE_FIELDS, Profile
from padi.profile.store import ProfileStore

logger = get_logger(__name__)

_JSON_FIELDS = frozenset({"personalization", "saved_items"})


def _to_column(name: str, value: Any) -> Any:
    """Convert a model value to its column representation."""
    if name in _JSON_FIELDS:
        return json.dumps(value)
    if isinstance(value, Tier):
        return value.value
    return value


class PostgresProfileStore(ProfileStore):
    """PostgreSQL implementation of ProfileStore."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize PostgreSQL profile store.

        Args:
            pool: Shared connection pool
        """
        self._pool = pool

    def _row_to_profile(self, row: asyncpg.Record) -> Profile:
        data = dict(row)
        for name in _JSON_FIELDS:
            if isinstance(data.get(name), str):
                data[name] = json.loads(data[name])
        return Profile.model_validate(data)

    async def get(self, identity_id: str) -> Profile | None:
        """Get the profile for an identity."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM profiles WHERE id = $1",
                    identity_id,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_profile_get_error", identity_id=identity_id, error=str(e))
            raise FetchError(f"Failed to get profile: {e}", cause=e) from e

        if not row:
            logger.debug("profile_not_found", identity_id=identity_id)
            return None
        return self._row_to_profile(row)

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile, returning the stored row."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO profiles (
                        id, tier, points, is_admin, personalization, saved_items, version
                    ) VALUES ($1, $2, $3, $4, $5::jsonb, $6::jsonb, 1)
                    RETURNING *
                    """,
                    profile.id,
                    profile.tier.value,
                    profile.points,
                    profile.is_admin,
                    json.dumps(profile.personalization),
                    json.dumps(profile.saved_items),
                )
        except asyncpg.UniqueViolationError as e:
            raise CreateConflictError(
                f"Profile already exists: {profile.id}", cause=e
            ) from e
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_profile_insert_error", identity_id=profile.id, error=str(e))
            raise PersistError(f"Failed to insert profile: {e}", cause=e) from e

        return self._row_to_profile(row)

    async def update(
        self,
        identity_id: str,
        changes: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Profile:
        """Replace whole fields of a profile, returning the stored row."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise PersistError(f"Fields are not updatable: {sorted(unknown)}")
        if not changes:
            raise PersistError("Empty profile update")

        assignments: list[str] = []
        args: list[Any] = [identity_id]
        for name, value in changes.items():
            args.append(_to_column(name, value))
            cast = "::jsonb" if name in _JSON_FIELDS else ""
            assignments.append(f"{name} = ${len(args)}{cast}")

        query = (
            f"UPDATE profiles SET {', '.join(assignments)}, "
            "version = version + 1, updated_at = NOW() WHERE id = $1"
        )
        if expected_version is not None:
            args.append(expected_version)
            query += f" AND version = ${len(args)}"
        query += " RETURNING *"

        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)
                if row is None:
                    actual = await conn.fetchval(
                        "SELECT version FROM profiles WHERE id = $1", identity_id
                    )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_profile_update_error", identity_id=identity_id, error=str(e))
            raise PersistError(f"Failed to update profile: {e}", cause=e) from e

        if row is None:
            if actual is None:
                raise PersistError(f"Profile not found: {identity_id}")
            raise VersionConflictError(
                f"Profile {identity_id} changed concurrently",
                expected_version=expected_version,
                actual_version=actual,
            )
        return self._row_to_profile(row)
