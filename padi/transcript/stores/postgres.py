"""PostgreSQL implementation of MessageStore.

`created_at` defaults to clock_timestamp(), which advances within a
transaction, so a batch inserted row by row keeps its order.
"""

from collections.abc import Sequence
from typing import Any

import asyncpg

from padi.db.pool import PostgresPool
from padi.errors import FetchError, PadiError, PersistError
from padi.observability.logging import get_logger
from padi.transcript.models import ChangeEvent, ChangeType, Message, MessageDraft
from padi.transcript.realtime.feed import ChangePublisher
from padi.transcript.store import MessageStore

logger = get_logger(__name__)


def _row_to_message(row: asyncpg.Record) -> Message:
    data: dict[str, Any] = dict(row)
    data["id"] = str(data["id"])
    return Message.model_validate(data)


class PostgresMessageStore(MessageStore):
    """PostgreSQL implementation of MessageStore."""

    def __init__(
        self, pool: PostgresPool, publisher: ChangePublisher | None = None
    ) -> None:
        """Initialize PostgreSQL message store.

        Args:
            pool: Shared connection pool
            publisher: Realtime publisher notified after each write
        """
        self._pool = pool
        self._publisher = publisher

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
        """Insert messages for an owner in one transaction."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    records = [
                        await conn.fetchrow(
                            """
                            INSERT INTO messages (owner_id, role, content)
                            VALUES ($1, $2, $3)
                            RETURNING *
                            """,
                            owner_id,
                            draft.role.value,
                            draft.content,
                        )
                        for draft in drafts
                    ]
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_message_insert_error", owner_id=owner_id, error=str(e))
            raise PersistError(f"Failed to insert messages: {e}", cause=e) from e

        rows = [_row_to_message(record) for record in records]
        for row in rows:
            await self._publish(owner_id, ChangeType.INSERT, row)
        return rows

    async def list_by_owner(self, owner_id: str) -> list[Message]:
        """List an owner's messages by creation time, oldest first."""
        try:
            async with self._pool.acquire() as conn:
                records = await conn.fetch(
                    """
                    SELECT * FROM messages
                    WHERE owner_id = $1
                    ORDER BY created_at ASC, id ASC
                    """,
                    owner_id,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_message_list_error", owner_id=owner_id, error=str(e))
            raise FetchError(f"Failed to list messages: {e}", cause=e) from e

        return [_row_to_message(record) for record in records]

    async def update_content(self, message_id: str, content: str) -> Message | None:
        """Replace a message's content."""
        try:
            async with self._pool.acquire() as conn:
                record = await conn.fetchrow(
                    "UPDATE messages SET content = $2 WHERE id = $1::uuid RETURNING *",
                    message_id,
                    content,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_message_update_error", message_id=message_id, error=str(e))
            raise PersistError(f"Failed to update message: {e}", cause=e) from e

        if record is None:
            return None
        row = _row_to_message(record)
        await self._publish(row.owner_id, ChangeType.UPDATE, row)
        return row

    async def delete_by_owner(self, owner_id: str) -> int:
        """Delete every message of an owner."""
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM messages WHERE owner_id = $1", owner_id
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_message_delete_error", owner_id=owner_id, error=str(e))
            raise PersistError(f"Failed to delete messages: {e}", cause=e) from e

        # execute() returns a status tag such as "DELETE 3".
        return int(result.split()[-1])
