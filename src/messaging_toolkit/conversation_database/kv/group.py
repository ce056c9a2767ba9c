"""
Group directory on top of 'KeyValueStore'.

Owns 'group:{id}' records and the per-user 'user_groups:{userId}' index
({"groupIds": [...]}). Group ids look like 'group_<ms>_<random>' so the
message routes can tell a group target from a user id by prefix alone.
"""

from collections.abc import Callable

from loguru import logger

from messaging_toolkit.conversation_database.cascade import Cascade, CascadeError, group_deletion
from messaging_toolkit.conversation_database.data_models.group import (
    GROUP_ID_PREFIX,
    Group,
    GroupDirectory,
    build_member_ids,
)
from messaging_toolkit.conversation_database.data_models.message import MessageDatabase
from messaging_toolkit.conversation_database.kv.keys import GROUP_PREFIX, group_key, user_groups_key
from messaging_toolkit.kv_store.base import KeyValueStore
from messaging_toolkit.utils.database import short_uid
from messaging_toolkit.utils.time import get_current_timestamp


class KVGroupDirectory(GroupDirectory):
    """
    'GroupDirectory' backed by the key-value store.

    Attributes:
        store: Shared key-value store.
        message_db: Message store, used by 'delete' to drop the group's messages.
        clock: Returns the current time in epoch milliseconds.
        pending_deletions: Group deletions that failed part-way, keyed by group id. The
            next 'delete' of the same id resumes them even though the record is gone.
    """

    def __init__(
        self,
        store: KeyValueStore,
        message_db: MessageDatabase,
        clock: Callable[[], int] = get_current_timestamp,
    ) -> None:
        self.store = store
        self.message_db = message_db
        self.clock = clock
        self.pending_deletions: dict[str, Cascade] = {}

    async def _add_to_user_index(self, user_id: str, group_id: str) -> None:
        key = user_groups_key(user_id)
        entry = await self.store.get(key) or {"groupIds": []}
        if group_id not in entry["groupIds"]:
            entry["groupIds"].append(group_id)
            await self.store.set(key, entry)

    async def _remove_from_user_index(self, user_id: str, group_id: str) -> bool:
        key = user_groups_key(user_id)
        entry = await self.store.get(key)
        if not entry or group_id not in entry["groupIds"]:
            return False
        entry["groupIds"] = [gid for gid in entry["groupIds"] if gid != group_id]
        await self.store.set(key, entry)
        return True

    async def create(self, name: str, creator_id: str, member_ids: list[str]) -> Group:
        created_at = self.clock()
        group = Group(
            id=f"{GROUP_ID_PREFIX}{created_at}_{short_uid()}",
            name=name,
            member_ids=build_member_ids(creator_id, member_ids),
            created_by=creator_id,
            created_at=created_at,
        )
        await self.store.set(group_key(group.id), group.to_store())

        # One member at a time; a failure leaves earlier members indexed.
        for member_id in group.member_ids:
            await self._add_to_user_index(member_id, group.id)

        logger.info(f"Created group {group.id} '{name}' with {len(group.member_ids)} members")
        return group

    async def get_group(self, group_id: str) -> Group | None:
        value = await self.store.get(group_key(group_id))
        return Group.model_validate(value) if value else None

    async def list_groups(self) -> list[Group]:
        return [Group.model_validate(value) for value in await self.store.get_by_prefix(GROUP_PREFIX)]

    async def list_group_ids_for_user(self, user_id: str) -> list[str]:
        entry = await self.store.get(user_groups_key(user_id))
        return list(entry["groupIds"]) if entry else []

    def deletion(self, group: Group) -> Cascade:
        """Build the resumable deletion cascade for 'group' without running it."""
        return group_deletion(
            group.id,
            list(group.member_ids),
            delete_record=lambda: self.store.delete(group_key(group.id)),
            remove_from_member=lambda member_id: self._remove_from_user_index(member_id, group.id),
            message_db=self.message_db,
        )

    async def delete(self, group_id: str) -> bool:
        cascade = self.pending_deletions.get(group_id)
        if cascade is None:
            group = await self.get_group(group_id)
            if group is None:
                return False
            cascade = self.deletion(group)
        else:
            logger.info(f"Resuming deletion of group {group_id} at step '{cascade.pending[0]}'")

        try:
            await cascade.run()
        except CascadeError:
            self.pending_deletions[group_id] = cascade
            raise
        self.pending_deletions.pop(group_id, None)
        return True

    async def remove_member(self, group_id: str, member_id: str) -> bool:
        group = await self.get_group(group_id)
        if group is None or member_id not in group.member_ids:
            return False
        group.member_ids = [mid for mid in group.member_ids if mid != member_id]
        await self.store.set(group_key(group_id), group.to_store())
        return True

    async def remove_user_from_all_groups(self, user_id: str) -> int:
        changed = 0
        for group in await self.list_groups():
            if user_id in group.member_ids and await self.remove_member(group.id, user_id):
                changed += 1
        return changed

    async def remove_user_index(self, user_id: str) -> bool:
        return await self.store.delete(user_groups_key(user_id))
