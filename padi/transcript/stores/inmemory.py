"""In-memory implementation of MessageStore."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from padi.errors import PadiError
from padi.observability.logging import get_logger
from padi.transcript.models import ChangeEvent, ChangeType, Message, MessageDraft
from padi.transcript.realtime.feed import ChangePublisher
from padi.transcript.store import MessageStore

logger = get_logger(__name__)


class InMemoryMessageStore(MessageStore):
    """In-memory implementation of MessageStore for testing and development.

    When given a publisher it emits INSERT and UPDATE events after each
    write, the way the hosted database's change feed does.
    """

    def __init__(self, publisher: ChangePublisher | None = None) -> None:
        """Initialize empty storage."""
        self._messages: dict[str, Message] = {}
        self._publisher = publisher
        self._last_created_at: datetime | None = None

    def _next_timestamp(self) -> datetime:
        # Strictly increasing so a batch keeps its order.
        now = datetime.now(UTC)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now

    async def _publish(self, owner_id: str, event_type: ChangeType, row: Message) -> None:
        if self._publisher is None:
            return
        try:
            await self._publisher.publish(
                owner_id, ChangeEvent(event_type=event_type, row=row)
            )
        except PadiError as e:
            logger.warning("change_publish_failed", owner_id=owner_id, error=str(e))

    async def insert_many(
        self, owner_id: str, drafts: Sequence[MessageDraft]
    ) -> list[Message]:
        """Insert messages for an owner in one call, in the given order."""
        rows = [
            Message(
                id=str(uuid4()),
                role=draft.role,
                content=draft.content,
                created_at=self._next_timestamp(),
                owner_id=owner_id,
            )
            for draft in drafts
        ]
        for row in rows:
            self._messages[row.id] = row.model_copy()
        for row in rows:
            await self._publish(owner_id, ChangeType.INSERT, row)
        return rows

    async def list_by_owner(self, owner_id: str) -> list[Message]:
        """List an owner's messages by creation time, oldest first."""
        rows = [m for m in self._messages.values() if m.owner_id == owner_id]
        rows.sort(key=lambda m: m.created_at)
        return [m.model_copy() for m in rows]

    async def update_content(self, message_id: str, content: str) -> Message | None:
        """Replace a message's content."""
        message = self._messages.get(message_id)
        if message is None:
            return None
        message.content = content
        row = message.model_copy()
        await self._publish(row.owner_id, ChangeType.UPDATE, row)
        return row

    async def delete_by_owner(self, owner_id: str) -> int:
        """Delete every message of an owner."""
        doomed = [mid for mid, m in self._messages.items() if m.owner_id == owner_id]
        for message_id in doomed:
            del self._messages[message_id]
        return len(doomed)
