from messaging_toolkit.api.auth.base import AuthProvider
from messaging_toolkit.api.auth.bearer import BearerTokenProvider

__all__ = ["AuthProvider", "BearerTokenProvider"]
