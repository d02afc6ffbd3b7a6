"""Transcript synchronizer configuration models."""

from pydantic import BaseModel, Field, model_validator


class TranscriptConfig(BaseModel):
    """Transcript synchronizer and realtime feed configuration."""

    topic_prefix: str = Field(
        default="messages-for-", description="Realtime topic prefix per identity"
    )
    signed_out_greeting: str = Field(
        default="Hi there! I'm Padi. Please sign in or create an account to start chatting.",
        description="Placeholder shown while no identity is bound",
    )
    welcome_greeting: str = Field(
        default="Welcome! I'm Padi. Let's have a chat.",
        description="Placeholder shown for an empty transcript",
    )
    reconnect_base_seconds: float = Field(
        default=0.5, ge=0.0, description="First reconnect backoff ceiling"
    )
    reconnect_max_seconds: float = Field(
        default=30.0, ge=0.0, description="Maximum reconnect backoff"
    )

    @model_validator(mode="after")
    def _check_backoff(self) -> "TranscriptConfig":
        if self.reconnect_max_seconds < self.reconnect_base_seconds:
            raise ValueError("reconnect_max_seconds must be >= reconnect_base_seconds")
        return self
