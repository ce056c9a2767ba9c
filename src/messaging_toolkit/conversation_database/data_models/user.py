"""
User profile data model and storage interface.

Profiles mirror the identity provider's accounts ('id', 'email') and add the
display 'name'. They are created on signup, renamed through the profile
settings and removed by the user deletion cascade.

Concrete implementation: 'KVUserDatabase'.
"""

from abc import ABC, abstractmethod

from messaging_toolkit.conversation_database.data_models.base import CamelModel


class User(CamelModel):
    """A user profile as shown to other users."""

    id: str
    email: str
    name: str


class UserDatabase(ABC):
    """Abstract repository for 'User' profiles."""

    @abstractmethod
    async def create_user(self, user: User) -> User:
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    async def list_users(self) -> list[User]:
        pass

    @abstractmethod
    async def update_name(self, user_id: str, name: str) -> User | None:
        """Rename the profile. Returns None when the profile does not exist."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        pass
