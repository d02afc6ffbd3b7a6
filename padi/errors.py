"""Error hierarchy for the synchronization core.

Backends wrap driver-specific errors (asyncpg, redis) in one of the
StoreError subclasses so callers handle a single taxonomy.
"""


class PadiError(Exception):
    """Base exception for all synchronization core errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class IdentityUnavailableError(PadiError):
    """Raised when an operation needs an active session and none is bound."""

    pass


class ProfileNotHydratedError(IdentityUnavailableError):
    """Raised when the profile is still provisional.

    The provisional profile holds defaults only, so balances read from it
    are not authoritative.
    """

    pass


class InsufficientFundsError(PadiError):
    """Raised when a debit exceeds the available points balance."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient points: {required} required, {available} available"
        )
        self.required = required
        self.available = available


class StoreError(PadiError):
    """Base exception for backing store errors."""

    pass


class FetchError(StoreError):
    """Raised when a profile or transcript read fails."""

    pass


class PersistError(StoreError):
    """Raised when a ledger, profile or transcript write fails."""

    pass


class ConflictError(PersistError):
    """Raised when a write conflicts with the stored state."""

    pass


class CreateConflictError(ConflictError):
    """Raised when a profile row already exists for the identity."""

    pass


class VersionConflictError(ConflictError):
    """Raised when a compare-and-set write finds a newer row version."""

    def __init__(
        self,
        message: str,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected_version = expected_version
        self.actual_version = actual_version


class RealtimeChannelError(PadiError):
    """Raised when the realtime feed reports an error or drops the channel."""

    pass
