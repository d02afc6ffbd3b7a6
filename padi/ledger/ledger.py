"""Points ledger: debit and credit against the session's profile.

Debits are optimistic: the local balance drops before the write is
confirmed and is restored if the write fails. Credits come from the
checkout success callback and only touch local state once the stored
row confirms them. Both persist through compare-and-set so a debit and
a credit racing from different devices cannot erase each other.
"""

from enum import Enum
from typing import Any

from padi.config.models.ledger import LedgerConfig
from padi.errors import InsufficientFundsError, PadiError
from padi.observability.logging import get_logger
from padi.observability.metrics import LEDGER_OPERATIONS, STALE_RESPONSES
from padi.profile.enums import Tier
from padi.profile.models import Profile, TierOffer
from padi.profile.store import ProfileStore
from padi.session.models import Session
from padi.session.mutation import compare_and_set, optimistic_update

logger = get_logger(__name__)


class Feature(str, Enum):
    """Paid features and the cost unit they are charged in."""

    LIVE_CONVERSATION_START = "live_conversation_start"
    TEXT_TO_SPEECH_CHAR = "text_to_speech_char"
    LOW_LATENCY_MESSAGE = "low_latency_message"


class Ledger:
    """Debit and credit operations on a points balance."""

    def __init__(self, store: ProfileStore, config: LedgerConfig | None = None) -> None:
        self._store = store
        self._config = config or LedgerConfig()

    @property
    def offers(self) -> list[TierOffer]:
        """Purchasable tiers, in catalog order."""
        return list(self._config.offers)

    def cost_of(self, feature: Feature, units: int = 1) -> int:
        """Points charged for `units` of `feature`."""
        if units < 0:
            raise ValueError("units must be non-negative")
        return getattr(self._config.costs, feature.value) * units

    async def charge(self, session: Session, feature: Feature, units: int = 1) -> int:
        """Debit the cost of using a feature. See `debit`."""
        return await self.debit(session, self.cost_of(feature, units))

    async def debit(self, session: Session, amount: int) -> int:
        """Spend `amount` points, returning the confirmed balance.

        Admins are never charged. The local balance is lowered before the
        write and restored if the write fails.

        Raises:
            IdentityUnavailableError: If the session is not bound
            ProfileNotHydratedError: If the profile is still provisional
            InsufficientFundsError: If the balance is below `amount`
            PersistError: If the new balance could not be stored
        """
        if amount < 0:
            raise ValueError("amount must be non-negative")
        session.require_active()

        if session.profile.is_admin:
            LEDGER_OPERATIONS.labels(operation="debit", outcome="admin_exempt").inc()
            return session.profile.points

        session.require_hydrated()
        available = session.profile.points
        if amount > available:
            LEDGER_OPERATIONS.labels(operation="debit", outcome="insufficient").inc()
            logger.info(
                "debit_insufficient_funds",
                identity_id=session.identity_id,
                amount=amount,
                available=available,
            )
            raise InsufficientFundsError(amount, available)
        if amount == 0:
            return available

        def compute(current: Profile) -> dict[str, Any] | None:
            if current.is_admin:
                return None
            if amount > current.points:
                raise InsufficientFundsError(amount, current.points)
            return {"points": current.points - amount}

        try:
            confirmed = await optimistic_update(
                session,
                "points",
                available - amount,
                lambda: compare_and_set(
                    self._store,
                    session.identity_id,
                    compute,
                    operation="debit",
                    max_attempts=self._config.max_cas_attempts,
                ),
                operation="debit",
            )
        except InsufficientFundsError:
            LEDGER_OPERATIONS.labels(operation="debit", outcome="insufficient").inc()
            raise
        except PadiError as e:
            LEDGER_OPERATIONS.labels(operation="debit", outcome="rolled_back").inc()
            logger.error(
                "debit_failed",
                identity_id=session.identity_id,
                amount=amount,
                error=str(e),
            )
            raise

        LEDGER_OPERATIONS.labels(operation="debit", outcome="success").inc()
        logger.info(
            "points_debited",
            identity_id=session.identity_id,
            amount=amount,
            balance=confirmed.points,
        )
        return confirmed.points

    async def credit(self, session: Session, tier: Tier, points_to_add: int) -> bool:
        """Grant purchased points and set the tier.

        Local state changes only after the stored row confirms the write.
        Returns False, after logging, when nothing was stored.
        """
        if points_to_add < 0:
            raise ValueError("points_to_add must be non-negative")
        if not session.is_active:
            LEDGER_OPERATIONS.labels(operation="credit", outcome="no_session").inc()
            logger.error("credit_without_session", tier=tier.value, points=points_to_add)
            return False

        token = session.fence()

        def compute(current: Profile) -> dict[str, Any]:
            return {"tier": tier, "points": current.points + points_to_add}

        try:
            confirmed = await compare_and_set(
                self._store,
                session.identity_id,
                compute,
                operation="credit",
                max_attempts=self._config.max_cas_attempts,
            )
        except PadiError as e:
            LEDGER_OPERATIONS.labels(operation="credit", outcome="failed").inc()
            logger.error(
                "credit_failed",
                identity_id=session.identity_id,
                tier=tier.value,
                points=points_to_add,
                error=str(e),
            )
            return False

        LEDGER_OPERATIONS.labels(operation="credit", outcome="success").inc()
        logger.info(
            "points_credited",
            identity_id=token.identity_id,
            tier=confirmed.tier.value,
            balance=confirmed.points,
        )

        if not session.accepts(token):
            STALE_RESPONSES.labels(operation="credit").inc()
            logger.info("stale_response_discarded", operation="credit", identity_id=token.identity_id)
            return True

        session.adopt_confirmed("tier", confirmed.tier)
        session.adopt_confirmed("points", confirmed.points)
        return True

    async def credit_offer(self, session: Session, offer: TierOffer) -> bool:
        """Credit a catalog offer's tier and points."""
        return await self.credit(session, offer.tier, offer.points)
