"""Merge-patch operations on personalization and saved items.

Each operation applies its change to the session right away, persists it
as a compare-and-set write against the freshly read row, and adopts the
stored value on success. On failure the local change is rolled back, the
error is logged and the caller gets False.
"""

from collections.abc import Callable, Mapping
from typing import Any

from padi.errors import PadiError
from padi.observability.logging import get_logger
from padi.profile.models import Profile, dedupe
from padi.profile.store import ProfileStore
from padi.session.models import Session
from padi.session.mutation import compare_and_set, optimistic_update

logger = get_logger(__name__)


class ProfilePatcher:
    """Whole-field writes to the profile behind a session."""

    def __init__(self, store: ProfileStore, *, max_cas_attempts: int = 5) -> None:
        self._store = store
        self._max_cas_attempts = max_cas_attempts

    async def _apply(
        self,
        session: Session,
        field: str,
        local_value: Any,
        compute: Callable[[Profile], dict[str, Any] | None],
        operation: str,
    ) -> bool:
        if not session.is_active:
            logger.warning("profile_patch_without_session", operation=operation)
            return False

        try:
            await optimistic_update(
                session,
                field,
                local_value,
                lambda: compare_and_set(
                    self._store,
                    session.identity_id,
                    compute,
                    operation=operation,
                    max_attempts=self._max_cas_attempts,
                ),
                operation=operation,
            )
        except PadiError as e:
            logger.error(
                f"{operation}_failed",
                identity_id=session.identity_id,
                error=str(e),
            )
            return False
        return True

    async def merge_personalization(
        self, session: Session, partial: Mapping[str, str]
    ) -> bool:
        """Shallow-merge `partial` over the stored personalization map."""
        patch = dict(partial)

        def compute(current: Profile) -> dict[str, Any] | None:
            merged = {**current.personalization, **patch}
            if merged == current.personalization:
                return None
            return {"personalization": merged}

        return await self._apply(
            session,
            "personalization",
            {**session.profile.personalization, **patch},
            compute,
            "merge_personalization",
        )

    async def update_language(self, session: Session, language: str) -> bool:
        """Set the preferred conversation language."""
        return await self.merge_personalization(session, {"language": language})

    async def replace_saved_items(self, session: Session, items: list[str]) -> bool:
        """Replace the saved-items list as a whole."""
        replacement = dedupe(items)

        def compute(current: Profile) -> dict[str, Any] | None:
            if current.saved_items == replacement:
                return None
            return {"saved_items": replacement}

        return await self._apply(
            session, "saved_items", replacement, compute, "replace_saved_items"
        )

    async def add_saved_item(self, session: Session, item: str) -> bool:
        """Append `item` unless it is already saved."""
        if item in session.profile.saved_items:
            return True

        def compute(current: Profile) -> dict[str, Any] | None:
            if item in current.saved_items:
                return None
            return {"saved_items": [*current.saved_items, item]}

        return await self._apply(
            session,
            "saved_items",
            [*session.profile.saved_items, item],
            compute,
            "add_saved_item",
        )

    async def remove_saved_item(self, session: Session, index: int) -> bool:
        """Remove the item at `index` of the session's list.

        The index is resolved to a value locally; the value is then removed
        from the stored list, so concurrent edits elsewhere cannot shift
        the write onto a different item.
        """
        local = session.profile.saved_items
        if not 0 <= index < len(local):
            logger.warning(
                "remove_saved_item_out_of_range",
                identity_id=session.identity_id,
                index=index,
                size=len(local),
            )
            return False
        item = local[index]

        def compute(current: Profile) -> dict[str, Any] | None:
            if item not in current.saved_items:
                return None
            return {"saved_items": [i for i in current.saved_items if i != item]}

        return await self._apply(
            session,
            "saved_items",
            [i for i in local if i != item],
            compute,
            "remove_saved_item",
        )

    async def merge_patch(
        self,
        session: Session,
        *,
        personalization: Mapping[str, str] | None = None,
        language: str | None = None,
        saved_items: list[str] | None = None,
    ) -> bool:
        """Dispatch a single-field patch.

        Exactly one of `personalization`, `language` or `saved_items`
        must be given.
        """
        given = [
            name
            for name, value in (
                ("personalization", personalization),
                ("language", language),
                ("saved_items", saved_items),
            )
            if value is not None
        ]
        if len(given) != 1:
            raise ValueError(f"merge_patch takes exactly one field, got {given}")

        if personalization is not None:
            return await self.merge_personalization(session, personalization)
        if language is not None:
            return await self.update_language(session, language)
        return await self.replace_saved_items(session, saved_items or [])
