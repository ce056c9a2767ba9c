"""
Messaging controller (Facade).

'MessagingController' is the single entry point for all non-admin application
logic. It coordinates the profile repository, the message store, the
conversation index, the group directory and the identity provider to serve
one request at a time: signup, contacts, group creation, sending and reading
messages, building the conversation list, and account settings.

No in-process state is shared between requests. Every multi-key update is a
sequence of independent key-value writes, so read paths skip references that
no longer resolve instead of failing.

The request payloads ('SignupInput', 'SendMessageInput', ...) accept missing
fields on purpose: validation happens here so each missing field produces the
specific 'BadRequest' message the clients display.
"""

from collections.abc import Callable

from loguru import logger
from pydantic import BaseModel

from messaging_toolkit.conversation_database.cascade import Cascade, CascadeError, CascadeReport, user_deletion
from messaging_toolkit.conversation_database.data_models.base import CamelModel
from messaging_toolkit.conversation_database.data_models.conversation import Conversation, ConversationIndex
from messaging_toolkit.conversation_database.data_models.group import Group, GroupDirectory, is_group_id
from messaging_toolkit.conversation_database.data_models.message import (
    Message,
    MessageDatabase,
    derive_message_id,
    latest,
)
from messaging_toolkit.conversation_database.data_models.user import User, UserDatabase
from messaging_toolkit.errors import BadRequest, NotFound
from messaging_toolkit.identity.base import Identity, IdentityProvider, Session
from messaging_toolkit.utils.time import get_current_timestamp


class SignupInput(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class LoginInput(BaseModel):
    email: str | None = None
    password: str | None = None


class PasswordResetInput(BaseModel):
    email: str | None = None


class CreateGroupInput(CamelModel):
    name: str | None = None
    member_ids: list[str] | None = None


class SendMessageInput(CamelModel):
    to_user_id: str | None = None
    group_id: str | None = None
    text: str | None = None


class ProfileInput(BaseModel):
    name: str | None = None


class PasswordChangeInput(CamelModel):
    current_password: str | None = None
    new_password: str | None = None


class AccountDeletionInput(BaseModel):
    password: str | None = None


class MessagingController:
    def __init__(
        self,
        user_db: UserDatabase,
        message_db: MessageDatabase,
        conversation_index: ConversationIndex,
        group_directory: GroupDirectory,
        identity_provider: IdentityProvider,
        min_password_length: int = 6,
        clock: Callable[[], int] = get_current_timestamp,
    ):
        self.user_db = user_db
        self.message_db = message_db
        self.conversation_index = conversation_index
        self.group_directory = group_directory
        self.identity_provider = identity_provider
        self.min_password_length = min_password_length
        self.clock = clock
        # User deletions that failed part-way, resumed by the next deletion of the same user.
        self.pending_deletions: dict[str, Cascade] = {}

    async def register_user(self, signup: SignupInput) -> User:
        if not signup.email or not signup.password or not signup.name:
            raise BadRequest("Email, password, and name are required")

        auth_user = await self.identity_provider.create_user(signup.email, signup.password, signup.name)
        user = await self.user_db.create_user(User(id=auth_user.id, email=auth_user.email, name=signup.name))
        logger.info(f"Registered user {user.id}")
        return user

    async def sign_in(self, login: LoginInput) -> Session:
        if not login.email or not login.password:
            raise BadRequest("Email and password are required")
        return await self.identity_provider.sign_in(login.email, login.password)

    async def request_password_reset(self, reset: PasswordResetInput) -> None:
        if not reset.email:
            raise BadRequest("Email is required")
        try:
            await self.identity_provider.request_password_reset(reset.email)
        except Exception as exc:
            # Whether the address exists must not leak through the response.
            logger.warning(f"Password reset request failed: {exc}")

    async def list_contacts(self, caller: Identity) -> list[User]:
        return [user for user in await self.user_db.list_users() if user.id != caller.id]

    async def get_user(self, user_id: str) -> User:
        user = await self.user_db.get_user_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def create_group(self, caller: Identity, group_input: CreateGroupInput) -> Group:
        if not group_input.name or group_input.member_ids is None:
            raise BadRequest("Group name and members are required")
        return await self.group_directory.create(group_input.name, caller.id, group_input.member_ids)

    async def _next_message_id(self, sender_id: str, target_id: str, timestamp: int) -> str:
        base_id = derive_message_id(sender_id, target_id, timestamp)
        message_id, attempt = base_id, 0
        while await self.message_db.exists(message_id):
            attempt += 1
            message_id = f"{base_id}:{attempt}"
        if attempt:
            logger.warning(f"Message id {base_id} already taken, stored as {message_id}")
        return message_id

    async def send_message(self, caller: Identity, message_input: SendMessageInput) -> Message:
        if (not message_input.to_user_id and not message_input.group_id) or not message_input.text:
            raise BadRequest("Recipient/group and message text are required")
        if message_input.to_user_id and message_input.group_id:
            raise BadRequest("A message goes either to a user or to a group, not both")

        timestamp = self.clock()
        target_id = message_input.group_id or message_input.to_user_id
        message = Message(
            id=await self._next_message_id(caller.id, target_id, timestamp),  # type: ignore[arg-type]
            from_user_id=caller.id,
            to_user_id=message_input.to_user_id or None,
            group_id=message_input.group_id or None,
            text=message_input.text,
            timestamp=timestamp,
        )
        await self.message_db.append(message)

        if message.is_direct:
            await self.conversation_index.record_direct_message(caller.id, message.to_user_id)  # type: ignore[arg-type]
        return message

    async def get_messages(self, caller: Identity, target_id: str) -> list[Message]:
        if is_group_id(target_id):
            return await self.message_db.list_for_group(target_id)
        return await self.message_db.list_for_direct(caller.id, target_id)

    async def _direct_conversations(self, caller: Identity) -> list[Conversation]:
        conversations = []
        for peer_id in await self.conversation_index.list_peers(caller.id):
            peer = await self.user_db.get_user_by_id(peer_id)
            if peer is None:
                logger.debug(f"Skipping conversation with deleted user {peer_id}")
                continue
            last = latest(await self.message_db.list_for_direct(caller.id, peer_id))
            conversations.append(
                Conversation(
                    id=peer.id,
                    type="dm",
                    name=peer.name,
                    email=peer.email,
                    latest_message=last.text if last else "",
                    timestamp=last.timestamp if last else 0,
                )
            )
        return conversations

    async def _group_conversations(self, caller: Identity) -> list[Conversation]:
        conversations = []
        for group_id in await self.group_directory.list_group_ids_for_user(caller.id):
            group = await self.group_directory.get_group(group_id)
            if group is None:
                logger.debug(f"Skipping deleted group {group_id}")
                continue
            last = latest(await self.message_db.list_for_group(group_id))
            conversations.append(
                Conversation(
                    id=group.id,
                    type="group",
                    name=group.name,
                    member_count=len(group.member_ids),
                    latest_message=last.text if last else "",
                    timestamp=last.timestamp if last else 0,
                )
            )
        return conversations

    async def list_conversations(self, caller: Identity) -> list[Conversation]:
        conversations = await self._direct_conversations(caller) + await self._group_conversations(caller)
        return sorted(conversations, key=lambda c: c.timestamp, reverse=True)

    async def update_profile(self, caller: Identity, profile: ProfileInput) -> str:
        name = (profile.name or "").strip()
        if not name:
            raise BadRequest("Name is required")

        await self.identity_provider.update_user(caller.id, name=name)
        if await self.user_db.update_name(caller.id, name) is None:
            logger.warning(f"No profile record to rename for user {caller.id}")
        return name

    async def change_password(self, caller: Identity, change: PasswordChangeInput) -> None:
        if not change.current_password or not change.new_password:
            raise BadRequest("Current password and new password are required")
        if len(change.new_password) < self.min_password_length:
            raise BadRequest(f"New password must be at least {self.min_password_length} characters")
        if not await self.identity_provider.verify_password(caller.email, change.current_password):
            raise BadRequest("Current password is incorrect")

        await self.identity_provider.update_user(caller.id, password=change.new_password)
        logger.info(f"Rotated password of user {caller.id}")

    def has_pending_deletion(self, user_id: str) -> bool:
        return user_id in self.pending_deletions

    async def delete_user_data(self, user_id: str) -> CascadeReport:
        """Run the user deletion cascade. Shared by self-service and admin deletion.

        A cascade that failed earlier for the same user is resumed at its failed
        step instead of being rebuilt.
        """
        cascade = self.pending_deletions.get(user_id)
        if cascade is None:
            cascade = user_deletion(
                user_id,
                identity_provider=self.identity_provider,
                user_db=self.user_db,
                conversation_index=self.conversation_index,
                group_directory=self.group_directory,
                message_db=self.message_db,
            )
        else:
            logger.info(f"Resuming deletion of user {user_id} at step '{cascade.pending[0]}'")

        try:
            report = await cascade.run()
        except CascadeError:
            self.pending_deletions[user_id] = cascade
            raise
        self.pending_deletions.pop(user_id, None)
        return report

    async def delete_account(self, caller: Identity, deletion: AccountDeletionInput) -> CascadeReport:
        if not deletion.password:
            raise BadRequest("Password is required to delete account")
        if not await self.identity_provider.verify_password(caller.email, deletion.password):
            raise BadRequest("Password is incorrect")
        return await self.delete_user_data(caller.id)
