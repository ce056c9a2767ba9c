"""
Group data model and the group directory interface.

A group goes 'nonexistent -> active -> deleted' and has no other lifecycle
state. Membership is fixed at creation apart from removals caused by user
deletion. Two denormalized structures must agree:

    group:{id}.memberIds      contains U   <=>   user_groups:{U}.groupIds contains id

Creation and deletion update both sides one key at a time without rollback,
so after a partial failure readers skip groups that no longer resolve.

Concrete implementation: 'KVGroupDirectory'.
"""

from abc import ABC, abstractmethod

from messaging_toolkit.conversation_database.data_models.base import CamelModel

GROUP_ID_PREFIX = "group_"


class Group(CamelModel):
    """A named group. 'member_ids' is ordered with the creator first and has no duplicates."""

    id: str
    name: str
    member_ids: list[str]
    created_by: str
    created_at: int


def is_group_id(target_id: str) -> bool:
    return target_id.startswith(GROUP_ID_PREFIX)


def build_member_ids(creator_id: str, member_ids: list[str]) -> list[str]:
    """Creator first, then the requested members in order, without duplicates."""
    ordered = [creator_id]
    for member_id in member_ids:
        if member_id not in ordered:
            ordered.append(member_id)
    return ordered


class GroupDirectory(ABC):
    """Abstract repository for 'Group' records and the per-user group index."""

    @abstractmethod
    async def create(self, name: str, creator_id: str, member_ids: list[str]) -> Group:
        """Persist a new group and add it to every member's group index."""
        pass

    @abstractmethod
    async def get_group(self, group_id: str) -> Group | None:
        pass

    @abstractmethod
    async def list_groups(self) -> list[Group]:
        pass

    @abstractmethod
    async def list_group_ids_for_user(self, user_id: str) -> list[str]:
        pass

    @abstractmethod
    async def delete(self, group_id: str) -> bool:
        """Delete the group, its member back-references and its messages.

        Returns False when the group does not exist.
        """
        pass

    @abstractmethod
    async def remove_member(self, group_id: str, member_id: str) -> bool:
        """Filter 'member_id' out of the group's members. Returns False if nothing changed."""
        pass

    @abstractmethod
    async def remove_user_from_all_groups(self, user_id: str) -> int:
        """Remove the user from every group listing them. Returns the number of groups changed."""
        pass

    @abstractmethod
    async def remove_user_index(self, user_id: str) -> bool:
        """Drop the user's own group index entry."""
        pass
