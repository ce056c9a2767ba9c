"""
Message data model and storage interface.

A message is a tagged union: exactly one of 'to_user_id' (direct message) or
'group_id' (group message) is set. Messages are immutable once written; they
only disappear through the user and group deletion cascades.

Ordering contract: conversation views are sorted ascending by 'timestamp';
the latest message of a conversation is the one with the greatest timestamp.
Ties on equal timestamps keep the scan order of the backend and carry no
meaning.

The 'MessageDatabase' ABC is the pluggable storage backend. Concrete
implementation: 'KVMessageDatabase'.
"""

from abc import ABC, abstractmethod

from pydantic import model_validator

from messaging_toolkit.conversation_database.data_models.base import CamelModel


class Message(CamelModel):
    """
    A single direct or group message.

    'id' is derived from '(from_user_id, to_user_id or group_id, timestamp)',
    see 'derive_message_id'.
    """

    id: str
    from_user_id: str
    to_user_id: str | None = None
    group_id: str | None = None
    text: str
    timestamp: int

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "Message":
        if (self.to_user_id is None) == (self.group_id is None):
            raise ValueError("A message needs exactly one of 'toUserId' or 'groupId'")
        return self

    @property
    def is_direct(self) -> bool:
        return self.to_user_id is not None

    @property
    def target_id(self) -> str:
        return self.group_id if self.group_id is not None else self.to_user_id  # type: ignore[return-value]

    def involves_user(self, user_id: str) -> bool:
        """True when 'user_id' is the sender or the direct recipient."""
        return self.from_user_id == user_id or self.to_user_id == user_id

    def is_between(self, user_a: str, user_b: str) -> bool:
        return (self.from_user_id == user_a and self.to_user_id == user_b) or (
            self.from_user_id == user_b and self.to_user_id == user_a
        )


def derive_message_id(sender_id: str, target_id: str, timestamp: int) -> str:
    return f"{sender_id}:{target_id}:{timestamp}"


def latest(messages: list[Message]) -> Message | None:
    """Return the message with the greatest timestamp, or None for an empty list."""
    return max(messages, key=lambda m: m.timestamp, default=None)


class MessageDatabase(ABC):
    """Abstract repository for 'Message' records."""

    @abstractmethod
    async def append(self, message: Message) -> Message:
        """Persist 'message' under its id. An existing record with the same id is overwritten."""
        pass

    @abstractmethod
    async def exists(self, message_id: str) -> bool:
        pass

    @abstractmethod
    async def list_all(self) -> list[Message]:
        pass

    @abstractmethod
    async def list_for_direct(self, user_a: str, user_b: str) -> list[Message]:
        """Messages exchanged between the two users in either direction, oldest first."""
        pass

    @abstractmethod
    async def list_for_group(self, group_id: str) -> list[Message]:
        """Messages posted to 'group_id', oldest first."""
        pass

    @abstractmethod
    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every direct message sent or received by 'user_id'.

        Group messages sent by the user are kept. Returns the number of deleted messages.
        """
        pass

    @abstractmethod
    async def delete_all_for_group(self, group_id: str) -> int:
        """Delete every message posted to 'group_id'. Returns the number of deleted messages."""
        pass
