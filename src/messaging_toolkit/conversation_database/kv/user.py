from messaging_toolkit.conversation_database.data_models.user import User, UserDatabase
from messaging_toolkit.conversation_database.kv.keys import USER_PREFIX, user_key
from messaging_toolkit.kv_store.base import KeyValueStore


class KVUserDatabase(UserDatabase):
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def create_user(self, user: User) -> User:
        await self.store.set(user_key(user.id), user.to_store())
        return user

    async def get_user_by_id(self, user_id: str) -> User | None:
        value = await self.store.get(user_key(user_id))
        return User.model_validate(value) if value else None

    async def list_users(self) -> list[User]:
        return [User.model_validate(value) for value in await self.store.get_by_prefix(USER_PREFIX)]

    async def update_name(self, user_id: str, name: str) -> User | None:
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None
        user = user.model_copy(update={"name": name})
        await self.store.set(user_key(user_id), user.to_store())
        return user

    async def delete_user(self, user_id: str) -> bool:
        return await self.store.delete(user_key(user_id))
