"""Points ledger configuration models."""

from pydantic import BaseModel, Field, field_validator

from padi.profile.enums import Tier
from padi.profile.models import TierOffer


class PointCostsConfig(BaseModel):
    """Point cost of each paid feature."""

    live_conversation_start: int = Field(
        default=50, ge=0, description="Cost to start a live conversation"
    )
    text_to_speech_char: int = Field(
        default=1, ge=0, description="Cost per synthesized character"
    )
    low_latency_message: int = Field(
        default=5, ge=0, description="Cost per low-latency chat message"
    )


def _default_offers() -> list[TierOffer]:
    return [
        TierOffer(tier=Tier.BASIC, price="$5", points=1000),
        TierOffer(tier=Tier.STANDARD, price="$10", points=2500),
        TierOffer(tier=Tier.PREMIUM, price="$20", points=6000),
    ]


class LedgerConfig(BaseModel):
    """Ledger and account provisioning configuration."""

    initial_points: int = Field(
        default=5000, ge=0, description="Points granted to a new profile"
    )
    admin_emails: list[str] = Field(
        default_factory=list,
        description="Administrator allow-list (case-insensitive)",
    )
    max_cas_attempts: int = Field(
        default=5, gt=0, description="Compare-and-set attempts per write"
    )
    costs: PointCostsConfig = Field(
        default_factory=PointCostsConfig, description="Per-feature costs"
    )
    offers: list[TierOffer] = Field(
        default_factory=_default_offers, description="Purchasable tiers"
    )

    @field_validator("admin_emails")
    @classmethod
    def _lowercase_emails(cls, value: list[str]) -> list[str]:
        return [email.strip().lower() for email in value]
