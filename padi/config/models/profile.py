"""Profile hydration configuration models."""

from pydantic import BaseModel, Field

from padi.profile.models import DEFAULT_PERSONALIZATION


class ProfileConfig(BaseModel):
    """Profile hydration configuration."""

    default_personalization: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PERSONALIZATION),
        description="Values back-filled into missing personalization keys",
    )
