"""Identity provider event models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuthEvent(str, Enum):
    """Authentication state transitions reported by the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


class Identity(BaseModel):
    """Authenticated user as reported by the provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Identity id")
    email: str | None = Field(default=None, description="Identity email")


class IdentityEvent(BaseModel):
    """An auth-state change, with the identity it leaves signed in."""

    model_config = ConfigDict(frozen=True)

    event: AuthEvent = Field(..., description="Transition kind")
    identity: Identity | None = Field(default=None, description="Signed-in identity")
