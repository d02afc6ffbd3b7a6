"""Account profiles: tier, points, personalization and saved items.

Hydration and merge-patch operations live in `padi.profile.hydration`
and `padi.profile.patch`.
"""

from padi.profile.enums import Tier
from padi.profile.models import (
    DEFAULT_PERSONALIZATION,
    REQUIRED_PERSONALIZATION_KEYS,
    Profile,
    TierOffer,
)

__all__ = [
    "DEFAULT_PERSONALIZATION",
    "REQUIRED_PERSONALIZATION_KEYS",
    "Profile",
    "Tier",
    "TierOffer",
]
