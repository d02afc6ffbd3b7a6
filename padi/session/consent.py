"""Locally persisted consent flag.

The flag belongs to the host application; the orchestrator only reads it
after hydration to decide whether to prompt, and records acceptance.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from padi.errors import FetchError, PersistError


class ConsentStore(ABC):
    """Abstract interface for the consent flag."""

    @abstractmethod
    async def has_consented(self) -> bool:
        """Whether consent was already given."""
        pass

    @abstractmethod
    async def record_consent(self) -> None:
        """Persist that consent was given."""
        pass


class InMemoryConsentStore(ConsentStore):
    """In-memory consent flag for testing and development."""

    def __init__(self, consented: bool = False) -> None:
        self._consented = consented

    async def has_consented(self) -> bool:
        return self._consented

    async def record_consent(self) -> None:
        self._consented = True


class FileConsentStore(ConsentStore):
    """Consent flag kept in a small JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    async def has_consented(self) -> bool:
        if not self._path.exists():
            return False
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise FetchError(f"Failed to read consent flag: {e}", cause=e) from e
        return data.get("consent") is True

    async def record_consent(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"consent": True}))
        except OSError as e:
            raise PersistError(f"Failed to write consent flag: {e}", cause=e) from e
