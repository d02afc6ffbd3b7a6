"""Identity binding: authentication events to sessions."""

from padi.identity.binder import IdentityBinder
from padi.identity.models import AuthEvent, Identity, IdentityEvent
from padi.identity.provider import IdentityProvider, InMemoryIdentityProvider

__all__ = [
    "AuthEvent",
    "Identity",
    "IdentityBinder",
    "IdentityEvent",
    "IdentityProvider",
    "InMemoryIdentityProvider",
]
