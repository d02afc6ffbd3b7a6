"""Tests for MessageTimeline ordering and de-duplication."""

from datetime import UTC, datetime, timedelta

import pytest

from padi.transcript import Message, MessageTimeline, Role

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def stored(message_id: str, seconds: int, content: str = "hi") -> Message:
    return Message(
        id=message_id,
        role=Role.USER,
        content=content,
        created_at=T0 + timedelta(seconds=seconds),
        owner_id="user-1",
    )


@pytest.fixture
def timeline() -> MessageTimeline:
    return MessageTimeline()


class TestInsert:
    """Tests for ordered insertion."""

    def test_orders_by_created_at(self, timeline: MessageTimeline) -> None:
        """Should place a late-arriving older message in order."""
        timeline.insert(stored("b", 2))
        timeline.insert(stored("c", 3))
        timeline.insert(stored("a", 1))

        assert [m.id for m in timeline] == ["a", "b", "c"]

    def test_equal_timestamps_keep_arrival_order(self, timeline: MessageTimeline) -> None:
        timeline.insert(stored("x", 1))
        timeline.insert(stored("y", 1))

        assert [m.id for m in timeline] == ["x", "y"]

    def test_duplicate_id_ignored(self, timeline: MessageTimeline) -> None:
        assert timeline.insert(stored("a", 1, "first"))
        assert not timeline.insert(stored("a", 1, "echo"))

        assert len(timeline) == 1
        assert timeline.messages[0].content == "first"

    def test_placeholder_stays_first(self, timeline: MessageTimeline) -> None:
        timeline.insert(stored("a", 1))
        timeline.insert(Message.placeholder("Welcome!"))

        assert timeline.messages[0].is_placeholder

    def test_naive_timestamps_treated_as_utc(self, timeline: MessageTimeline) -> None:
        timeline.insert(stored("aware", 5))
        timeline.insert(
            Message(
                id="naive",
                role=Role.ASSISTANT,
                content="hi",
                created_at=datetime(2024, 5, 1, 12, 0, 1),
            )
        )

        assert [m.id for m in timeline] == ["naive", "aware"]


class TestReplaceAndReset:
    """Tests for content replacement, reset and history detection."""

    def test_replace_content(self, timeline: MessageTimeline) -> None:
        timeline.insert(stored("a", 1, "par"))

        assert timeline.replace_content("a", "partial reply")
        assert timeline.messages[0].content == "partial reply"

    def test_replace_unknown_id(self, timeline: MessageTimeline) -> None:
        assert not timeline.replace_content("missing", "x")

    def test_messages_are_copies(self, timeline: MessageTimeline) -> None:
        timeline.insert(stored("a", 1, "original"))
        timeline.messages[0].content = "mutated"

        assert timeline.messages[0].content == "original"

    def test_reset_dedupes(self, timeline: MessageTimeline) -> None:
        timeline.reset([stored("a", 1), stored("a", 1), stored("b", 2)])

        assert [m.id for m in timeline] == ["a", "b"]
        assert "a" in timeline

    def test_has_history(self, timeline: MessageTimeline) -> None:
        timeline.reset([Message.placeholder("Welcome!")])
        assert not timeline.has_history()

        timeline.insert(stored("a", 1))
        assert timeline.has_history()
