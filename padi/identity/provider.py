"""Identity provider interface and an in-memory implementation."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from padi.identity.models import AuthEvent, Identity, IdentityEvent


class IdentityProvider(ABC):
    """Authentication collaborator.

    Implementations adapt a hosted auth service; its internals are out
    of scope here.
    """

    @abstractmethod
    def events(self) -> AsyncIterator[IdentityEvent]:
        """Stream auth-state changes, starting with the current state."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current authentication session."""
        pass


class InMemoryIdentityProvider(IdentityProvider):
    """Queue-backed provider for testing and development."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[IdentityEvent] = asyncio.Queue()
        self._current: Identity | None = None

    @property
    def current(self) -> Identity | None:
        return self._current

    def emit(self, event: IdentityEvent) -> None:
        self._current = event.identity
        self._queue.put_nowait(event)

    def sign_in(self, identity: Identity) -> IdentityEvent:
        event = IdentityEvent(event=AuthEvent.SIGNED_IN, identity=identity)
        self.emit(event)
        return event

    async def sign_out(self) -> None:
        self.emit(IdentityEvent(event=AuthEvent.SIGNED_OUT))

    async def events(self) -> AsyncIterator[IdentityEvent]:
        while True:
            yield await self._queue.get()
