"""
Message store on top of 'KeyValueStore'.

Every read is a scan of the whole 'message:' prefix followed by an in-process
filter and sort, so the cost of a read grows with the total number of
messages in the system, not with the size of the conversation.
"""

from loguru import logger

from messaging_toolkit.conversation_database.data_models.message import Message, MessageDatabase
from messaging_toolkit.conversation_database.kv.keys import MESSAGE_PREFIX, message_key
from messaging_toolkit.kv_store.base import KeyValueStore


def _by_timestamp(messages: list[Message]) -> list[Message]:
    return sorted(messages, key=lambda m: m.timestamp)


class KVMessageDatabase(MessageDatabase):
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def append(self, message: Message) -> Message:
        await self.store.set(message_key(message.id), message.to_store())
        return message

    async def exists(self, message_id: str) -> bool:
        return await self.store.get(message_key(message_id)) is not None

    async def list_all(self) -> list[Message]:
        return [Message.model_validate(value) for value in await self.store.get_by_prefix(MESSAGE_PREFIX)]

    async def list_for_direct(self, user_a: str, user_b: str) -> list[Message]:
        messages = await self.list_all()
        return _by_timestamp([m for m in messages if m.is_between(user_a, user_b)])

    async def list_for_group(self, group_id: str) -> list[Message]:
        messages = await self.list_all()
        return _by_timestamp([m for m in messages if m.group_id == group_id])

    async def delete_all_for_user(self, user_id: str) -> int:
        deleted = 0
        for message in await self.list_all():
            if message.is_direct and message.involves_user(user_id):
                await self.store.delete(message_key(message.id))
                deleted += 1
        logger.info(f"Deleted {deleted} direct messages of user {user_id}")
        return deleted

    async def delete_all_for_group(self, group_id: str) -> int:
        deleted = 0
        for message in await self.list_all():
            if message.group_id == group_id:
                await self.store.delete(message_key(message.id))
                deleted += 1
        logger.info(f"Deleted {deleted} messages of group {group_id}")
        return deleted
