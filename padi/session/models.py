"""Session context models.

A Session is the per-identity view presentation code reads. It is never
persisted. Every async operation captures a FencingToken before its
first suspension point and applies its result only if the session still
accepts that token, so responses issued for a superseded identity are
dropped instead of corrupting the current view.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from padi.errors import IdentityUnavailableError, ProfileNotHydratedError
from padi.profile.models import Profile


class SessionState(str, Enum):
    """Hydration state of a session.

    UNBOUND: revoked; nothing on the session may be trusted or mutated.
    PROVISIONAL: identity_id and email are authoritative, the profile
        holds defaults.
    HYDRATED: the profile mirrors the stored row.
    """

    UNBOUND = "unbound"
    PROVISIONAL = "provisional"
    HYDRATED = "hydrated"


class FencingToken(BaseModel):
    """Identifies the session an async operation was issued for."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    generation: int


class Session(BaseModel):
    """Mutable account view for the bound identity."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    identity_id: str = Field(..., description="Identity id")
    email: str | None = Field(default=None, description="Identity email")
    generation: int = Field(..., description="Binding generation")
    profile: Profile = Field(..., description="Current profile view")
    state: SessionState = Field(
        default=SessionState.PROVISIONAL, description="Hydration state"
    )

    # field name -> sequence number of the write that last set it locally
    _field_writers: dict[str, int] = PrivateAttr(default_factory=dict)
    _write_seq: int = PrivateAttr(default=0)

    @property
    def is_active(self) -> bool:
        return self.state != SessionState.UNBOUND

    @property
    def is_hydrated(self) -> bool:
        return self.state == SessionState.HYDRATED

    @property
    def language(self) -> str:
        return self.profile.language

    def fence(self) -> FencingToken:
        """Capture the token for an operation issued now."""
        return FencingToken(identity_id=self.identity_id, generation=self.generation)

    def accepts(self, token: FencingToken) -> bool:
        """Whether a result issued under `token` may still be applied."""
        return self.is_active and token == self.fence()

    def mark_hydrated(self, profile: Profile) -> None:
        """Replace the provisional profile with the stored row."""
        self.profile = profile
        self.state = SessionState.HYDRATED
        self._field_writers.clear()

    def claim_field(self, field: str) -> tuple[int, int | None]:
        """Register a local write to `field`.

        Returns the write's sequence number and the sequence number of
        the write it displaced, if any.
        """
        self._write_seq += 1
        previous = self._field_writers.get(field)
        self._field_writers[field] = self._write_seq
        return self._write_seq, previous

    def owns_field(self, field: str, seq: int) -> bool:
        """Whether the local value of `field` was last set by write `seq`."""
        return self._field_writers.get(field) == seq

    def set_field_writer(self, field: str, seq: int | None) -> None:
        if seq is None:
            self._field_writers.pop(field, None)
        else:
            self._field_writers[field] = seq

    def adopt_confirmed(self, field: str, value: object) -> None:
        """Set `field` to a stored value outside any pending local write."""
        setattr(self.profile, field, value)
        self.claim_field(field)

    def revoke(self) -> None:
        """Detach the session; later results for it are discarded."""
        self.state = SessionState.UNBOUND

    def require_active(self) -> None:
        if not self.is_active:
            raise IdentityUnavailableError("Session is no longer bound to an identity")

    def require_hydrated(self) -> None:
        self.require_active()
        if not self.is_hydrated:
            raise ProfileNotHydratedError(
                f"Profile for {self.identity_id} is not hydrated yet"
            )
