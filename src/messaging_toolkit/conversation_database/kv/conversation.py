from messaging_toolkit.conversation_database.data_models.conversation import ConversationIndex
from messaging_toolkit.conversation_database.kv.keys import conversations_key
from messaging_toolkit.kv_store.base import KeyValueStore


class KVConversationIndex(ConversationIndex):
    """
    Peer sets stored as 'conversations:{userId}' -> {"userIds": [...]}.

    'record_direct_message' performs two independent read-modify-write cycles,
    sender side first. A write is skipped when the peer is already present, so
    repeated DMs between the same pair cost two reads and no writes.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def _add_peer(self, user_id: str, peer_id: str) -> None:
        key = conversations_key(user_id)
        entry = await self.store.get(key) or {"userIds": []}
        if peer_id not in entry["userIds"]:
            entry["userIds"].append(peer_id)
            await self.store.set(key, entry)

    async def record_direct_message(self, sender_id: str, recipient_id: str) -> None:
        await self._add_peer(sender_id, recipient_id)
        await self._add_peer(recipient_id, sender_id)

    async def list_peers(self, user_id: str) -> list[str]:
        entry = await self.store.get(conversations_key(user_id))
        return list(entry["userIds"]) if entry else []

    async def remove_user(self, user_id: str) -> bool:
        return await self.store.delete(conversations_key(user_id))
