"""
Authentication provider abstractions.

An 'AuthProvider' integrates with a FastAPI application to identify the caller
of every request. Routes depend on 'get_current_identity'; the provider also
registers whatever routes its scheme needs through 'bind_to_app'.

The toolkit ships one implementation: 'BearerTokenProvider' resolves
'Authorization: Bearer <token>' headers through the identity provider and
exposes '/login' to issue tokens.
"""

from abc import ABC, abstractmethod

from fastapi import FastAPI, Request

from messaging_toolkit.identity.base import Identity


class AuthProvider(ABC):
    """
    Abstract base class for authentication backends.

    Implementors must supply a FastAPI dependency that resolves to the caller's
    'Identity' ('get_current_identity') and a setup hook that registers all
    required routes with the application ('bind_to_app').
    """

    @abstractmethod
    async def get_current_identity(self, request: Request) -> Identity:
        """FastAPI dependency that returns the authenticated caller.

        Raise 'Unauthorized' if the request is not authenticated.
        """
        pass

    @abstractmethod
    def bind_to_app(self, app: FastAPI) -> None:
        """Register routes required by this provider."""
        pass
