"""Transcript synchronizer: initial load plus realtime merge for one identity.

States:
    UNBOUND  - no identity; the view holds the sign-in greeting
    LOADING  - subscribed, ordered snapshot being fetched
    LIVE     - snapshot applied, realtime events merged as they arrive

The subscription is opened before the snapshot is fetched so no change
between the two is lost; duplicates are dropped by id. When the channel
fails or is closed by the server the synchronizer waits with exponential
backoff and full jitter, then resubscribes and reloads the snapshot.
"""

import asyncio
import random
from collections.abc import Sequence
from enum import Enum

from padi.config.models.transcript import TranscriptConfig
from padi.errors import RealtimeChannelError
from padi.observability.logging import get_logger
from padi.observability.metrics import REALTIME_EVENTS, REALTIME_RECONNECTS, STALE_RESPONSES
from padi.session.models import FencingToken, Session
from padi.transcript.models import ChangeEvent, ChangeType, Message, MessageDraft
from padi.transcript.realtime.feed import RealtimeFeed, RealtimeSubscription
from padi.transcript.store import MessageStore
from padi.transcript.timeline import MessageTimeline

logger = get_logger(__name__)


class SyncState(str, Enum):
    """Lifecycle state of the synchronizer."""

    UNBOUND = "unbound"
    LOADING = "loading"
    LIVE = "live"


class TranscriptSynchronizer:
    """Keeps the local transcript consistent with the message store."""

    def __init__(
        self,
        store: MessageStore,
        feed: RealtimeFeed,
        config: TranscriptConfig | None = None,
    ) -> None:
        self._store = store
        self._feed = feed
        self._config = config or TranscriptConfig()
        self._timeline = MessageTimeline()
        self._timeline.reset([Message.placeholder(self._config.signed_out_greeting)])
        self._state = SyncState.UNBOUND
        self._session: Session | None = None
        self._task: asyncio.Task[None] | None = None
        self._live = asyncio.Event()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the local transcript."""
        return self._timeline.messages

    @property
    def has_history(self) -> bool:
        return self._timeline.has_history()

    def _welcome(self) -> Message:
        return Message.placeholder(self._config.welcome_greeting)

    def _owns(self, session: Session, token: FencingToken) -> bool:
        return self._session is session and session.accepts(token)

    def _discard_stale(self, operation: str, token: FencingToken) -> None:
        STALE_RESPONSES.labels(operation=operation).inc()
        logger.info("stale_response_discarded", operation=operation, identity_id=token.identity_id)

    def backoff_delay(self, attempt: int) -> float:
        """Full-jitter exponential backoff for reconnect `attempt` (1-based)."""
        ceiling = min(
            self._config.reconnect_max_seconds,
            self._config.reconnect_base_seconds * 2 ** (attempt - 1),
        )
        return random.uniform(0, ceiling)

    async def start(self, session: Session) -> None:
        """Bind to `session` and begin loading its transcript."""
        await self.stop()
        session.require_active()

        self._session = session
        self._state = SyncState.LOADING
        self._live.clear()
        self._task = asyncio.create_task(
            self._run(session, session.fence()),
            name=f"transcript-sync-{session.identity_id}",
        )
        logger.info("transcript_sync_started", identity_id=session.identity_id)

    async def stop(self) -> None:
        """Unbind, unsubscribe and show the sign-in greeting."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self._session is not None:
            logger.info("transcript_sync_stopped", identity_id=self._session.identity_id)
        self._session = None
        self._state = SyncState.UNBOUND
        self._live.clear()
        self._timeline.reset([Message.placeholder(self._config.signed_out_greeting)])

    async def wait_until_live(self, timeout: float | None = None) -> bool:
        """Wait for the initial load to finish. False on timeout."""
        try:
            await asyncio.wait_for(self._live.wait(), timeout)
        except TimeoutError:
            return False
        return True

    async def _run(self, session: Session, token: FencingToken) -> None:
        attempt = 0
        while True:
            subscription: RealtimeSubscription | None = None
            try:
                subscription = await self._feed.subscribe(token.identity_id)
                await self._load(session, token)
                if not self._owns(session, token):
                    return

                self._state = SyncState.LIVE
                self._live.set()
                attempt = 0
                logger.info("transcript_live", identity_id=token.identity_id)

                async for event in subscription:
                    self._merge(session, token, event)
                raise RealtimeChannelError("Realtime channel closed by server")
            except RealtimeChannelError as e:
                logger.error(
                    "realtime_channel_error",
                    identity_id=token.identity_id,
                    error=str(e),
                )
            except Exception as e:
                logger.error(
                    "transcript_sync_failed",
                    identity_id=token.identity_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            finally:
                if subscription is not None:
                    await self._unsubscribe(subscription)

            if not self._owns(session, token):
                return

            attempt += 1
            self._state = SyncState.LOADING
            self._live.clear()
            delay = self.backoff_delay(attempt)
            REALTIME_RECONNECTS.inc()
            logger.warning(
                "realtime_reconnect_scheduled",
                identity_id=token.identity_id,
                attempt=attempt,
                delay_seconds=round(delay, 3),
            )
            await asyncio.sleep(delay)

    async def _unsubscribe(self, subscription: RealtimeSubscription) -> None:
        try:
            await subscription.close()
        except Exception as e:
            logger.warning(
                "realtime_unsubscribe_failed",
                identity_id=subscription.owner_id,
                error=str(e),
            )

    async def _load(self, session: Session, token: FencingToken) -> None:
        rows = await self._store.list_by_owner(token.identity_id)
        if not self._owns(session, token):
            self._discard_stale("transcript_load", token)
            return

        self._timeline.reset(rows or [self._welcome()])
        logger.info(
            "transcript_loaded",
            identity_id=token.identity_id,
            count=len(rows),
        )

    def _merge(self, session: Session, token: FencingToken, event: ChangeEvent) -> None:
        if not self._owns(session, token):
            self._discard_stale("realtime_event", token)
            return

        row = event.row
        if row.id is None or (row.owner_id and row.owner_id != token.identity_id):
            REALTIME_EVENTS.labels(event_type=event.event_type.value, outcome="foreign").inc()
            return

        if event.event_type == ChangeType.INSERT:
            outcome = "inserted" if self._timeline.insert(row) else "duplicate"
        else:
            replaced = self._timeline.replace_content(row.id, row.content)
            outcome = "updated" if replaced else "dropped"
        REALTIME_EVENTS.labels(event_type=event.event_type.value, outcome=outcome).inc()

    async def resync(self, session: Session) -> bool:
        """Reload the full ordered transcript now."""
        if not session.is_active or self._session is not session:
            return False
        try:
            await self._load(session, session.fence())
        except Exception as e:
            logger.error("transcript_fetch_failed", identity_id=session.identity_id, error=str(e))
            return False
        return True

    async def append(
        self, session: Session, drafts: Sequence[MessageDraft]
    ) -> list[Message]:
        """Persist new messages for the session's identity.

        Returns the stored rows with their ids, or an empty list on any
        failure; there is no partial success.
        """
        if not session.is_active or not drafts:
            return []

        token = session.fence()
        try:
            rows = await self._store.insert_many(token.identity_id, drafts)
        except Exception as e:
            logger.error(
                "append_messages_failed",
                identity_id=token.identity_id,
                count=len(drafts),
                error=str(e),
            )
            return []

        if self._owns(session, token):
            for row in rows:
                self._timeline.insert(row)
        else:
            self._discard_stale("append", token)
        return rows

    async def replace_content(self, session: Session, message_id: str, content: str) -> None:
        """Replace a message's content, used while streaming a reply.

        The local view changes first and is not rolled back; a failed
        write is logged only.
        """
        if not session.is_active or not message_id:
            return

        token = session.fence()
        if self._owns(session, token):
            self._timeline.replace_content(message_id, content)

        try:
            await self._store.update_content(message_id, content)
        except Exception as e:
            logger.error(
                "replace_content_failed",
                identity_id=token.identity_id,
                message_id=message_id,
                error=str(e),
            )

    async def clear(self, session: Session) -> bool:
        """Delete every stored message of the identity. Irreversible."""
        if not session.is_active:
            return False

        token = session.fence()
        try:
            deleted = await self._store.delete_by_owner(token.identity_id)
        except Exception as e:
            logger.error("clear_history_failed", identity_id=token.identity_id, error=str(e))
            return False

        if self._owns(session, token):
            self._timeline.reset([self._welcome()])
        else:
            self._discard_stale("clear", token)
        logger.info("transcript_cleared", identity_id=token.identity_id, deleted=deleted)
        return True
