"""Transcript domain models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One chat turn.

    Stored messages always carry an id, a creation time and an owner.
    Placeholder greetings are local only and have none of the three.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str | None = Field(default=None, description="Store-assigned id")
    role: Role = Field(..., description="Author role")
    content: str = Field(..., description="Message text")
    created_at: datetime | None = Field(default=None, description="Creation time")
    owner_id: str | None = Field(default=None, description="Owning identity id")

    @field_validator("created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_placeholder(self) -> bool:
        return self.id is None

    @classmethod
    def placeholder(cls, content: str) -> "Message":
        """Build a local, non-persisted assistant greeting."""
        return cls(role=Role.ASSISTANT, content=content)


class MessageDraft(BaseModel):
    """A message to append; the store assigns id and timestamp."""

    role: Role = Field(..., description="Author role")
    content: str = Field(..., description="Message text")


class ChangeType(str, Enum):
    """Row-level change delivered by the realtime feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"


class ChangeEvent(BaseModel):
    """Realtime notification carrying the full changed row."""

    event_type: ChangeType = Field(..., description="Kind of change")
    row: Message = Field(..., description="Row after the change")
