"""MessageStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from padi.transcript.models import Message, MessageDraft


class MessageStore(ABC):
    """Abstract interface for the remote message collection.

    Messages are keyed by a store-generated id and indexed by owner and
    creation time. Implementations raise FetchError on read failures and
    PersistError on write failures.
    """

    @abstractmethod
    async def insert_many(
        self, owner_id: str, drafts: Sequence[MessageDraft]
    ) -> list[Message]:
        """Insert messages for an owner in one call, in the given order."""
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Message]:
        """List an owner's messages by creation time, oldest first."""
        pass

    @abstractmethod
    async def update_content(self, message_id: str, content: str) -> Message | None:
        """Replace a message's content. Returns None if the id is unknown."""
        pass

    @abstractmethod
    async def delete_by_owner(self, owner_id: str) -> int:
        """Delete every message of an owner, returning the count."""
        pass
