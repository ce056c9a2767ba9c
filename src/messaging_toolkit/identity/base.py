"""
Identity provider abstractions.

The identity provider owns credentials and bearer tokens. The messaging core
never sees a password hash: it only consumes an authenticated 'Identity'
(id + email) resolved from a token, and asks the provider to create, rename,
re-verify, rotate or delete accounts.

Concrete implementation: 'LocalIdentityProvider'.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel


class Identity(BaseModel):
    """The caller of a request, as resolved from its bearer token."""

    id: str
    email: str


class AuthUser(BaseModel):
    """Account metadata kept by the identity provider."""

    id: str
    email: str
    name: str
    created_at: datetime
    last_sign_in_at: datetime | None = None


class Session(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthUser


class IdentityProvider(ABC):
    """Abstract base class for account and token management backends."""

    @abstractmethod
    async def create_user(self, email: str, password: str, name: str) -> AuthUser:
        """Create an account. Raise 'BadRequest' if the email is already registered."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Issue a bearer token. Raise 'Unauthorized' on wrong credentials."""
        pass

    @abstractmethod
    async def resolve_token(self, token: str) -> Identity:
        """Return the identity behind 'token'. Raise 'Unauthorized' if it is invalid or expired."""
        pass

    @abstractmethod
    async def verify_password(self, email: str, password: str) -> bool:
        pass

    @abstractmethod
    async def update_user(self, user_id: str, name: str | None = None, password: str | None = None) -> AuthUser:
        """Update the display name and/or rotate the password. Raise 'NotFound' for unknown ids."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        """Delete the account. Returns False when it did not exist."""
        pass

    @abstractmethod
    async def list_users(self) -> list[AuthUser]:
        pass

    @abstractmethod
    async def request_password_reset(self, email: str) -> None:
        """Start a password reset. Must not reveal whether the email is registered."""
        pass
