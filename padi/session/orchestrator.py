"""Session orchestrator: owns the current session and wires the core together.

Identity events go through the IdentityBinder. When the bound identity
changes, the previous session is revoked (its in-flight results are then
discarded by fencing), profile hydration is started in the background and
the transcript synchronizer is rebound. Presentation code calls the
mutation methods here; each one is scoped to the session current at the
time of the call.
"""

import asyncio
from collections.abc import Mapping, Sequence

from padi.config import Settings, get_settings
from padi.errors import IdentityUnavailableError, PadiError
from padi.identity.binder import IdentityBinder
from padi.identity.models import IdentityEvent
from padi.identity.provider import IdentityProvider
from padi.ledger.ledger import Feature, Ledger
from padi.observability.logging import get_logger
from padi.profile.enums import Tier
from padi.profile.hydration import ProfileHydrator
from padi.profile.models import TierOffer
from padi.profile.patch import ProfilePatcher
from padi.profile.store import ProfileStore
from padi.session.consent import ConsentStore, InMemoryConsentStore
from padi.session.models import Session
from padi.transcript.models import Message, MessageDraft
from padi.transcript.realtime.feed import RealtimeFeed
from padi.transcript.store import MessageStore
from padi.transcript.synchronizer import TranscriptSynchronizer

logger = get_logger(__name__)


class SessionOrchestrator:
    """Single owner of the mutable session view."""

    def __init__(
        self,
        *,
        identity_provider: IdentityProvider,
        profile_store: ProfileStore,
        message_store: MessageStore,
        feed: RealtimeFeed,
        consent_store: ConsentStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._identity_provider = identity_provider
        self._consent_store = consent_store or InMemoryConsentStore()
        self._binder = IdentityBinder(settings.profile.default_personalization)
        self._hydrator = ProfileHydrator(
            profile_store,
            admin_emails=settings.ledger.admin_emails,
            initial_points=settings.ledger.initial_points,
            default_personalization=settings.profile.default_personalization,
        )
        self._patcher = ProfilePatcher(
            profile_store, max_cas_attempts=settings.ledger.max_cas_attempts
        )
        self.ledger = Ledger(profile_store, settings.ledger)
        self.transcript = TranscriptSynchronizer(message_store, feed, settings.transcript)

        self._session: Session | None = None
        self._hydration_task: asyncio.Task[None] | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self.needs_consent = False

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def offers(self) -> list[TierOffer]:
        return self.ledger.offers

    @property
    def messages(self) -> list[Message]:
        return self.transcript.messages

    @property
    def has_history(self) -> bool:
        return self.transcript.has_history

    def _require_session(self) -> Session:
        if self._session is None or not self._session.is_active:
            raise IdentityUnavailableError("No identity is signed in")
        return self._session

    async def start(self) -> None:
        """Follow the identity provider's auth events."""
        if self._listen_task is not None:
            logger.warning("orchestrator_already_started")
            return
        self._listen_task = asyncio.create_task(self._listen(), name="identity-events")

    async def stop(self) -> None:
        """Stop following auth events and tear the session down."""
        task, self._listen_task = self._listen_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        hydration, self._hydration_task = self._hydration_task, None
        if hydration is not None and not hydration.done():
            hydration.cancel()
            try:
                await hydration
            except asyncio.CancelledError:
                pass

        if self._session is not None:
            self._session.revoke()
            self._session = None
        await self.transcript.stop()

    async def _listen(self) -> None:
        async for event in self._identity_provider.events():
            await self.on_identity_event(event)

    async def on_identity_event(self, event: IdentityEvent) -> None:
        """Apply an auth-state change."""
        previous = self._session
        session = self._binder.on_identity_event(event, previous)
        if session is previous:
            return

        self._session = session
        if previous is not None:
            previous.revoke()

        if session is None:
            self.needs_consent = False
            await self.transcript.stop()
            return

        self._hydration_task = asyncio.create_task(
            self._hydrate(session), name=f"hydrate-{session.identity_id}"
        )
        await self.transcript.start(session)

    async def _hydrate(self, session: Session) -> None:
        await self._hydrator.hydrate(session)
        if session is not self._session:
            return
        try:
            self.needs_consent = not await self._consent_store.has_consented()
        except PadiError as e:
            logger.warning("consent_flag_unreadable", error=str(e))
            self.needs_consent = True

    async def settle(self, timeout: float | None = None) -> bool:
        """Wait until hydration finished and the transcript is live.

        Returns False on timeout.
        """
        task = self._hydration_task
        if task is not None:
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout)
            except TimeoutError:
                return False
        if self._session is None:
            return True
        return await self.transcript.wait_until_live(timeout)

    async def sign_out(self) -> None:
        """Ask the identity provider to end the session."""
        try:
            await self._identity_provider.sign_out()
        except PadiError as e:
            logger.error("sign_out_failed", error=str(e))

    async def accept_consent(self) -> None:
        await self._consent_store.record_consent()
        self.needs_consent = False

    # Ledger

    async def debit(self, amount: int) -> int:
        return await self.ledger.debit(self._require_session(), amount)

    async def charge(self, feature: Feature, units: int = 1) -> int:
        return await self.ledger.charge(self._require_session(), feature, units)

    async def complete_checkout(self, tier: Tier, points_granted: int) -> bool:
        """Checkout success callback."""
        session = self._session
        if session is None:
            logger.error("checkout_completed_without_session", tier=tier.value)
            return False
        return await self.ledger.credit(session, tier, points_granted)

    # Profile

    async def update_personalization(self, partial: Mapping[str, str]) -> bool:
        if self._session is None:
            return False
        return await self._patcher.merge_personalization(self._session, partial)

    async def update_language(self, language: str) -> bool:
        if self._session is None:
            return False
        return await self._patcher.update_language(self._session, language)

    async def add_saved_item(self, item: str) -> bool:
        if self._session is None:
            return False
        return await self._patcher.add_saved_item(self._session, item)

    async def remove_saved_item(self, index: int) -> bool:
        if self._session is None:
            return False
        return await self._patcher.remove_saved_item(self._session, index)

    # Transcript

    async def append_messages(self, drafts: Sequence[MessageDraft]) -> list[Message]:
        if self._session is None:
            return []
        return await self.transcript.append(self._session, drafts)

    async def replace_message_content(self, message_id: str, content: str) -> None:
        if self._session is None:
            return
        await self.transcript.replace_content(self._session, message_id, content)

    async def clear_history(self) -> bool:
        if self._session is None:
            return False
        return await self.transcript.clear(self._session)
