"""Optimistic update and compare-and-set helpers for profile writes.

`compare_and_set` turns a read-modify-write into a versioned update that
retries when another writer got there first. `optimistic_update` applies
a value to the session before persisting and restores the snapshot when
the persist fails.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from padi.errors import FetchError, PadiError, PersistError, VersionConflictError
from padi.observability.logging import get_logger
from padi.observability.metrics import CAS_CONFLICTS, LEDGER_ROLLBACKS, STALE_RESPONSES
from padi.profile.models import Profile
from padi.profile.store import ProfileStore
from padi.session.models import Session

logger = get_logger(__name__)

ChangeFn = Callable[[Profile], dict[str, Any] | None]


async def compare_and_set(
    store: ProfileStore,
    identity_id: str,
    compute: ChangeFn,
    *,
    operation: str,
    max_attempts: int = 5,
) -> Profile:
    """Apply `compute` to the freshly read row with a versioned update.

    `compute` receives the current stored profile and returns the fields
    to write, or None when no write is needed. It may raise to abort.

    Raises:
        FetchError: If the profile row does not exist or cannot be read
        VersionConflictError: If every attempt lost a race
    """
    for attempt in range(1, max_attempts + 1):
        current = await store.get(identity_id)
        if current is None:
            raise FetchError(f"Profile not found: {identity_id}")

        changes = compute(current)
        if not changes:
            return current

        try:
            return await store.update(
                identity_id, changes, expected_version=current.version
            )
        except VersionConflictError as e:
            CAS_CONFLICTS.labels(operation=operation).inc()
            logger.info(
                "cas_conflict_retry",
                operation=operation,
                identity_id=identity_id,
                attempt=attempt,
                expected_version=e.expected_version,
                actual_version=e.actual_version,
            )

    raise VersionConflictError(
        f"{operation} for {identity_id} lost {max_attempts} compare-and-set races"
    )


def _rollback(
    session: Session,
    field: str,
    snapshot: Any,
    claim: tuple[int, int | None],
    operation: str,
) -> None:
    seq, displaced = claim
    if not session.is_active:
        return
    if not session.owns_field(field, seq):
        # A later write set the field after ours; its value stands.
        logger.info(
            "rollback_skipped_superseded",
            operation=operation,
            identity_id=session.identity_id,
            field=field,
        )
        return
    setattr(session.profile, field, snapshot)
    session.set_field_writer(field, displaced)
    LEDGER_ROLLBACKS.labels(field=field).inc()
    logger.warning(
        "optimistic_update_rolled_back",
        operation=operation,
        identity_id=session.identity_id,
        field=field,
    )


async def optimistic_update(
    session: Session,
    field: str,
    local_value: Any,
    persist: Callable[[], Awaitable[Profile]],
    *,
    operation: str,
) -> Profile:
    """Apply `local_value` now, persist, then adopt the confirmed value.

    On failure the pre-update value is restored only while this write is
    still the last one to have set the field locally, and the error is
    re-raised (non-core exceptions are wrapped in PersistError).
    """
    token = session.fence()
    snapshot = getattr(session.profile, field)
    setattr(session.profile, field, local_value)
    claim = session.claim_field(field)

    try:
        confirmed = await persist()
    except PadiError:
        if session.accepts(token):
            _rollback(session, field, snapshot, claim, operation)
        raise
    except Exception as e:
        if session.accepts(token):
            _rollback(session, field, snapshot, claim, operation)
        raise PersistError(f"Failed to persist {field}: {e}", cause=e) from e

    if not session.accepts(token):
        STALE_RESPONSES.labels(operation=operation).inc()
        logger.info(
            "stale_response_discarded",
            operation=operation,
            identity_id=token.identity_id,
        )
        return confirmed

    setattr(session.profile, field, getattr(confirmed, field))
    session.set_field_writer(field, claim[0])
    return confirmed
