from messaging_toolkit.identity.base import AuthUser, Identity, IdentityProvider, Session
from messaging_toolkit.identity.local import LocalIdentityProvider

__all__ = [
    "AuthUser",
    "Identity",
    "IdentityProvider",
    "LocalIdentityProvider",
    "Session",
]
