"""Local ordered view of a transcript."""

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime

from padi.transcript.models import Message

_EARLIEST = datetime.min.replace(tzinfo=UTC)


def _order_key(message: Message) -> datetime:
    # Placeholders have no timestamp and stay at the head.
    return message.created_at or _EARLIEST


class MessageTimeline:
    """Messages ordered by creation time, at most one entry per id.

    Arrivals are placed by timestamp rather than appended, so a message
    from a slower sender lands where it belongs. Equal timestamps keep
    arrival order.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._ids

    @property
    def messages(self) -> list[Message]:
        return [m.model_copy() for m in self._messages]

    def reset(self, messages: Iterable[Message]) -> None:
        self._messages = []
        self._ids = set()
        for message in messages:
            self.insert(message)

    def insert(self, message: Message) -> bool:
        """Insert `message` in order. Returns False for a known id."""
        if message.id is not None:
            if message.id in self._ids:
                return False
            self._ids.add(message.id)

        index = bisect_right(self._messages, _order_key(message), key=_order_key)
        self._messages.insert(index, message.model_copy())
        return True

    def replace_content(self, message_id: str, content: str) -> bool:
        """Replace the content of `message_id` in place."""
        if message_id not in self._ids:
            return False
        for message in self._messages:
            if message.id == message_id:
                message.content = content
                return True
        return False

    def has_history(self) -> bool:
        """False when the view is a single placeholder greeting."""
        return not (len(self._messages) == 1 and self._messages[0].is_placeholder)
