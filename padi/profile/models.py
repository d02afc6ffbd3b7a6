"""Profile domain models.

Contains the persisted per-identity Profile document and the read-only
TierOffer catalog entry consumed by checkout.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from padi.profile.enums import Tier

REQUIRED_PERSONALIZATION_KEYS: tuple[str, ...] = (
    "Name",
    "Location",
    "Interests",
    "language",
)

DEFAULT_PERSONALIZATION: dict[str, str] = {
    "Name": "Padi",
    "Location": "the cloud",
    "Interests": "learning new things and chatting",
    "language": "English",
}

DEFAULT_LANGUAGE = "English"

# Fields a whole-field update may replace. is_admin is set once at creation.
UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "tier",
    "points",
    "personalization",
    "saved_items",
})


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def dedupe(items: list[str]) -> list[str]:
    """Drop repeated values, keeping the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class Profile(BaseModel):
    """Persisted account state for one identity.

    Keyed by the identity id. `version` increments on every stored
    update and backs compare-and-set writes.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(..., description="Identity id")
    tier: Tier = Field(default=Tier.FREE, description="Subscription tier")
    points: int = Field(default=0, description="Spendable points balance")
    is_admin: bool = Field(default=False, description="Administrator flag")
    personalization: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PERSONALIZATION),
        description="Assistant personalization settings",
    )
    saved_items: list[str] = Field(
        default_factory=list, description="Saved items, unique by value"
    )
    version: int = Field(default=0, ge=0, description="Row version")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    @field_validator("saved_items")
    @classmethod
    def _unique_saved_items(cls, value: list[str]) -> list[str]:
        return dedupe(value)

    @model_validator(mode="after")
    def _check_balance(self) -> "Profile":
        if self.points < 0 and not self.is_admin:
            raise ValueError("points must be non-negative for non-admin profiles")
        return self

    @property
    def language(self) -> str:
        """Preferred conversation language."""
        return self.personalization.get("language") or DEFAULT_LANGUAGE

    @classmethod
    def provisional(
        cls,
        identity_id: str,
        personalization: dict[str, str] | None = None,
    ) -> "Profile":
        """Build the default profile shown before hydration completes."""
        return cls(
            id=identity_id,
            personalization=dict(personalization or DEFAULT_PERSONALIZATION),
        )

    def with_changes(self, changes: dict[str, Any]) -> "Profile":
        """Return a validated copy with `changes` applied and version bumped."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields are not updatable: {sorted(unknown)}")
        data = self.model_dump()
        data.update(changes)
        data["version"] = self.version + 1
        data["updated_at"] = utc_now()
        return Profile.model_validate(data)


class TierOffer(BaseModel):
    """Catalog entry for a purchasable tier."""

    model_config = ConfigDict(frozen=True)

    tier: Tier = Field(..., description="Tier granted on purchase")
    price: str = Field(..., description="Display price")
    points: int = Field(..., ge=0, description="Points granted on purchase")
