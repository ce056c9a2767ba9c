"""
Conversation index and the conversation list view.

The conversation index is a per-user adjacency list of direct-message peers.
It stores no messages: it only answers "who has this user exchanged DMs
with?". Every new DM writes both sides so that the index stays symmetric
(B in peers(A) <=> A in peers(B)); there is no compensation if the process
dies between the two writes, so readers must tolerate a one-sided entry and
peer ids whose profile no longer exists.

'Conversation' is never persisted. It is the per-request projection that
merges DM peers and group memberships, each annotated with its latest
message.

Concrete implementation: 'KVConversationIndex'.
"""

from abc import ABC, abstractmethod
from typing import Literal

from messaging_toolkit.conversation_database.data_models.base import CamelModel


class Conversation(CamelModel):
    """One entry of a user's conversation list, either a DM peer or a group."""

    id: str
    type: Literal["dm", "group"]
    name: str
    email: str | None = None
    member_count: int | None = None
    latest_message: str = ""
    timestamp: int = 0


class ConversationIndex(ABC):
    """Abstract repository for the per-user set of direct-message peers."""

    @abstractmethod
    async def record_direct_message(self, sender_id: str, recipient_id: str) -> None:
        """Add each user to the other's peer set. Idempotent."""
        pass

    @abstractmethod
    async def list_peers(self, user_id: str) -> list[str]:
        """Peer ids in the order they were first recorded."""
        pass

    @abstractmethod
    async def remove_user(self, user_id: str) -> bool:
        """Drop the user's own peer set.

        Other users' sets keep the id; it dangles until read paths skip it.
        """
        pass
